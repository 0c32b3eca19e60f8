"""PurchaseOrder aggregate (CQRS) — inbound goods expected from a supplier.

Receipts against a purchase order advance its lines from Pending to Received
and the order itself through Pending → Partial → Completed. Receiving more
than expected is allowed (over-delivery is the receiver's call) and simply
completes the line.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, HasMany, Integer, String

from fulfillment.domain import fulfillment
from fulfillment.purchasing.events import PurchaseOrderCreated, PurchaseOrderReceiptRecorded


class PurchaseOrderStatus(Enum):
    PENDING = "Pending"
    PARTIAL = "Partial"
    COMPLETED = "Completed"


class PurchaseOrderLineStatus(Enum):
    PENDING = "Pending"
    RECEIVED = "Received"


def _check_line_keys(lines_data, required):
    """Every line must be a mapping carrying the required keys."""
    problems = []
    for index, line in enumerate(lines_data):
        if not isinstance(line, dict):
            problems.append(f"Line {index} is not a mapping")
            continue
        missing = [key for key in required if line.get(key) in (None, "")]
        if missing:
            problems.append(f"Line {index} is missing {', '.join(missing)}")
    if problems:
        raise ValidationError({"lines": problems})


@fulfillment.entity(part_of="PurchaseOrder")
class PurchaseOrderLine:
    sku = String(required=True, max_length=50)
    name = String(max_length=255)
    expected_quantity = Integer(required=True, min_value=1)
    received_quantity = Integer(default=0, min_value=0)
    status = String(
        choices=PurchaseOrderLineStatus,
        default=PurchaseOrderLineStatus.PENDING.value,
    )


@fulfillment.aggregate
class PurchaseOrder:
    po_number = String(identifier=True, max_length=50)
    supplier = String(required=True, max_length=255)
    expected_date = Date()
    status = String(
        choices=PurchaseOrderStatus,
        default=PurchaseOrderStatus.PENDING.value,
    )
    lines = HasMany(PurchaseOrderLine)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, po_number, supplier, lines_data, expected_date=None):
        if not lines_data:
            raise ValidationError({"lines": ["A purchase order needs at least one line"]})
        _check_line_keys(lines_data, ("sku", "expected_quantity"))

        now = datetime.now(UTC)
        po = cls(
            po_number=po_number,
            supplier=supplier,
            expected_date=expected_date,
            status=PurchaseOrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        for line in lines_data:
            po.add_lines(
                PurchaseOrderLine(
                    sku=line["sku"],
                    name=line.get("name"),
                    expected_quantity=line["expected_quantity"],
                    received_quantity=line.get("received_quantity", 0),
                )
            )
        po.raise_(
            PurchaseOrderCreated(
                po_number=po_number,
                supplier=supplier,
                line_count=len(lines_data),
                created_at=now,
            )
        )
        return po

    def record_receipt(self, sku, quantity):
        """Add received units to the line for ``sku`` and roll up the status."""
        if PurchaseOrderStatus(self.status) == PurchaseOrderStatus.COMPLETED:
            raise ValidationError({"po_number": [f"Purchase order {self.po_number} is already completed"]})

        line = next((ln for ln in (self.lines or []) if ln.sku == sku), None)
        if line is None:
            raise ValidationError({"sku": [f"{sku} is not on purchase order {self.po_number}"]})

        line.received_quantity = (line.received_quantity or 0) + quantity
        if line.received_quantity >= line.expected_quantity:
            line.status = PurchaseOrderLineStatus.RECEIVED.value

        if all(ln.status == PurchaseOrderLineStatus.RECEIVED.value for ln in self.lines):
            self.status = PurchaseOrderStatus.COMPLETED.value
        else:
            self.status = PurchaseOrderStatus.PARTIAL.value

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            PurchaseOrderReceiptRecorded(
                po_number=self.po_number,
                sku=sku,
                quantity=quantity,
                line_received_quantity=line.received_quantity,
                status=self.status,
                recorded_at=now,
            )
        )
