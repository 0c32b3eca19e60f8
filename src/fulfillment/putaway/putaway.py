"""PutawayTask aggregate (CQRS) — move received goods from the dock to storage.

A task is created by every successful goods receipt and points the operator
from the receiving dock to the SKU's home location. Confirmation has no scan
gate: the receipt already proved what arrived, so completing the move is
trusted.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String

from fulfillment.domain import fulfillment
from fulfillment.errors import UnknownTask
from fulfillment.putaway.events import PutawayCompleted, PutawayTaskCreated


class PutawayStatus(Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class PutawayPriority(Enum):
    NORMAL = "Normal"
    HIGH = "High"


@fulfillment.aggregate
class PutawayTask:
    receipt_id = Identifier(required=True)  # id of the batch the receipt created
    po_number = String(max_length=50)
    sku = String(required=True, max_length=50)
    product_name = String(max_length=255)
    batch_number = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)
    source_location = String(required=True, max_length=100)
    suggested_location = String(required=True, max_length=100)
    status = String(
        choices=PutawayStatus,
        default=PutawayStatus.PENDING.value,
    )
    priority = String(
        choices=PutawayPriority,
        default=PutawayPriority.NORMAL.value,
    )
    created_at = DateTime()
    completed_at = DateTime()

    @classmethod
    def for_receipt(
        cls,
        receipt_id,
        sku,
        quantity,
        batch_number,
        source_location,
        suggested_location,
        product_name=None,
        po_number=None,
        priority=PutawayPriority.NORMAL.value,
    ):
        now = datetime.now(UTC)
        task = cls(
            receipt_id=receipt_id,
            po_number=po_number,
            sku=sku,
            product_name=product_name,
            batch_number=batch_number,
            quantity=quantity,
            source_location=source_location,
            suggested_location=suggested_location,
            status=PutawayStatus.PENDING.value,
            priority=priority,
            created_at=now,
        )
        task.raise_(
            PutawayTaskCreated(
                task_id=str(task.id),
                receipt_id=str(receipt_id),
                sku=sku,
                quantity=quantity,
                source_location=source_location,
                suggested_location=suggested_location,
                created_at=now,
            )
        )
        return task

    @property
    def is_pending(self) -> bool:
        return self.status == PutawayStatus.PENDING.value

    def complete(self):
        if not self.is_pending:
            raise UnknownTask(f"Putaway task {self.id} is no longer open")

        now = datetime.now(UTC)
        self.status = PutawayStatus.COMPLETED.value
        self.completed_at = now
        self.raise_(
            PutawayCompleted(
                task_id=str(self.id),
                sku=self.sku,
                quantity=self.quantity,
                location=self.suggested_location,
                completed_at=now,
            )
        )
