"""Picking task grouping strategies: Wave, Batch and Zone."""

from dataclasses import dataclass, field
from enum import Enum

from fulfillment.order.order import OrderPriority, PickStatus


class PickStrategy(Enum):
    WAVE = "Wave"
    BATCH = "Batch"
    ZONE = "Zone"


_WAVE_ORDER = [OrderPriority.CRITICAL.value, OrderPriority.HIGH.value, OrderPriority.NORMAL.value]


@dataclass
class TaskGroup:
    key: str
    title: str
    tasks: list = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(t.quantity for t in self.tasks)


def _bucket(tasks, key_fn) -> dict[str, list]:
    buckets: dict[str, list] = {}
    for task in tasks:
        buckets.setdefault(key_fn(task), []).append(task)
    return buckets


def group_tasks(tasks, strategy: PickStrategy | str) -> list[TaskGroup]:
    """Group pending tasks. Empty groups are omitted; input order is kept within a group."""
    strategy = PickStrategy(strategy)
    pending = [t for t in tasks if t.status == PickStatus.PENDING.value]

    if strategy == PickStrategy.WAVE:
        buckets = _bucket(pending, lambda t: t.priority)
        return [TaskGroup(key=p, title=f"{p} Priority Wave", tasks=buckets[p]) for p in _WAVE_ORDER if p in buckets]

    if strategy == PickStrategy.BATCH:
        buckets = _bucket(pending, lambda t: t.sku)
        return [TaskGroup(key=sku, title=f"SKU Batch: {sku}", tasks=buckets[sku]) for sku in sorted(buckets)]

    buckets = _bucket(pending, lambda t: t.zone)
    return [TaskGroup(key=zone, title=f"{zone} Picking List", tasks=buckets[zone]) for zone in sorted(buckets)]
