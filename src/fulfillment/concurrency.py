"""Per-key locks for the engine.

One ``threading.Lock`` per SKU and one per order, created on first use and
kept for the life of the process. Several keys are always acquired in sorted
order so two reservations over overlapping SKU sets cannot deadlock.
"""

import threading
from contextlib import ExitStack, contextmanager


class KeyedLocks:
    def __init__(self, name: str):
        self.name = name
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, key) -> threading.Lock:
        key = str(key)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key):
        with self.lock_for(key):
            yield

    @contextmanager
    def hold_many(self, keys):
        with ExitStack() as stack:
            for key in sorted({str(k) for k in keys}):
                stack.enter_context(self.lock_for(key))
            yield

    @contextmanager
    def try_hold(self, key):
        """Yield True with the lock held, or False at once if someone else holds it."""
        lock = self.lock_for(key)
        acquired = lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                lock.release()

    def clear(self):
        with self._guard:
            self._locks.clear()


sku_locks = KeyedLocks("sku")
order_locks = KeyedLocks("order")
purchase_order_locks = KeyedLocks("purchase_order")
order_number_locks = KeyedLocks("order_number")
