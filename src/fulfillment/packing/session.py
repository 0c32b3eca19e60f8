"""PackingSession aggregate (CQRS) — the packer's checklist for one order.

The session is keyed by order id. It is opened by the first verification
toggle on a pack-eligible order, and closed either when the order ships or
when the packer discards it. A closed session is reopened empty on the next
toggle.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, String, Text

from fulfillment.domain import fulfillment
from fulfillment.errors import MismatchError
from fulfillment.packing.events import PackItemToggled, PackSessionClosed, PackSessionOpened


class PackSessionStatus(Enum):
    OPEN = "Open"
    CLOSED = "Closed"


@fulfillment.aggregate
class PackingSession:
    order_id = String(identifier=True, max_length=50)
    line_skus = Text(required=True)  # JSON list of strings
    verified_skus = Text(default="[]")  # JSON list of strings
    status = String(
        choices=PackSessionStatus,
        default=PackSessionStatus.OPEN.value,
    )
    opened_at = DateTime()
    closed_at = DateTime()

    @classmethod
    def open(cls, order_id, line_skus):
        now = datetime.now(UTC)
        skus = sorted(set(line_skus))
        session = cls(
            order_id=str(order_id),
            line_skus=json.dumps(skus),
            verified_skus="[]",
            status=PackSessionStatus.OPEN.value,
            opened_at=now,
        )
        session._raise_opened(now)
        return session

    def reopen(self, line_skus):
        now = datetime.now(UTC)
        self.line_skus = json.dumps(sorted(set(line_skus)))
        self.verified_skus = "[]"
        self.status = PackSessionStatus.OPEN.value
        self.opened_at = now
        self.closed_at = None
        self._raise_opened(now)

    def _raise_opened(self, now):
        self.raise_(
            PackSessionOpened(
                order_id=self.order_id,
                line_skus=self.line_skus,
                opened_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self.status == PackSessionStatus.OPEN.value

    @property
    def expected(self) -> list[str]:
        return json.loads(self.line_skus)

    @property
    def verified(self) -> list[str]:
        return json.loads(self.verified_skus or "[]")

    def missing_skus(self) -> list[str]:
        verified = set(self.verified)
        return [sku for sku in self.expected if sku not in verified]

    @property
    def is_complete(self) -> bool:
        return set(self.verified) == set(self.expected)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def toggle(self, sku) -> bool:
        """Flip ``sku`` in or out of the verified set. Returns its new state."""
        if sku not in self.expected:
            raise MismatchError(f"SKU {sku} is not on order {self.order_id}")

        verified = set(self.verified)
        if sku in verified:
            verified.discard(sku)
            now_verified = False
        else:
            verified.add(sku)
            now_verified = True
        self.verified_skus = json.dumps(sorted(verified))

        self.raise_(
            PackItemToggled(
                order_id=self.order_id,
                sku=sku,
                verified="true" if now_verified else "false",
                toggled_at=datetime.now(UTC),
            )
        )
        return now_verified

    def close(self, reason="Shipped"):
        now = datetime.now(UTC)
        self.status = PackSessionStatus.CLOSED.value
        self.closed_at = now
        self.raise_(
            PackSessionClosed(
                order_id=self.order_id,
                reason=reason,
                closed_at=now,
            )
        )

    def discard(self):
        self.close(reason="Discarded")
