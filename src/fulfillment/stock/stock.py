"""SkuRecord aggregate (CQRS) — the inventory ledger for one SKU.

Stock Level Model:
    on_hand:   Physical units present in the warehouse
    allocated: Units reserved against orders that have not shipped
    available: max(0, on_hand - allocated), derived, never stored

Batches record the provenance of received stock. Their quantities track a
subset of on-hand stock (opening balances have no batch), so the batch total
is not expected to equal on_hand.
"""

from datetime import UTC, date, datetime
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, HasMany, Integer, String

from fulfillment.domain import fulfillment
from fulfillment.errors import InsufficientStock, InvariantViolation
from fulfillment.stock.events import (
    BatchComplianceUpdated,
    LowStockDetected,
    SkuRegistered,
    StockReceived,
    StockReleased,
    StockReserved,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ComplianceStatus(Enum):
    COMPLIANT = "Compliant"
    NON_COMPLIANT = "Non_Compliant"
    PENDING_REVIEW = "Pending_Review"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@fulfillment.entity(part_of="SkuRecord")
class Batch:
    """A received lot of stock. Immutable apart from its compliance status."""

    batch_number = String(required=True, max_length=50)
    lot_number = String(max_length=50)
    expiry_date = Date()
    quantity = Integer(required=True, min_value=1)
    compliance_status = String(
        choices=ComplianceStatus,
        default=ComplianceStatus.PENDING_REVIEW.value,
    )
    received_date = Date(required=True)
    sequence = Integer(default=0)  # receipt order within the SKU


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@fulfillment.aggregate
class SkuRecord:
    sku = String(identifier=True, max_length=50)
    name = String(required=True, max_length=255)
    category = String(max_length=100)
    unit_price = Float(default=0.0, min_value=0.0)
    on_hand = Integer(default=0, min_value=0)
    allocated = Integer(default=0, min_value=0)
    reorder_point = Integer(default=0, min_value=0)
    location = String(required=True, max_length=100)
    batches = HasMany(Batch)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, sku, name, location, on_hand=0, reorder_point=0, unit_price=0.0, category=None):
        """Register a SKU in the ledger with an opening on-hand balance."""
        now = datetime.now(UTC)
        record = cls(
            sku=sku,
            name=name,
            category=category,
            location=location,
            on_hand=on_hand,
            allocated=0,
            reorder_point=reorder_point,
            unit_price=unit_price,
            created_at=now,
            updated_at=now,
        )
        record.raise_(
            SkuRegistered(
                sku=sku,
                name=name,
                location=location,
                on_hand=on_hand,
                reorder_point=reorder_point,
                registered_at=now,
            )
        )
        return record

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    @property
    def available(self) -> int:
        return max(0, (self.on_hand or 0) - (self.allocated or 0))

    def verify_levels(self) -> None:
        """Raise InvariantViolation if more is allocated than is on hand."""
        if (self.allocated or 0) > (self.on_hand or 0):
            raise InvariantViolation(self.sku, self.on_hand, self.allocated)

    def ordered_batches(self) -> list:
        return sorted(self.batches or [], key=lambda b: b.sequence)

    # -------------------------------------------------------------------
    # Helper
    # -------------------------------------------------------------------
    def _check_low_stock(self):
        """Raise LowStockDetected if available is at or below reorder point."""
        if self.available <= (self.reorder_point or 0):
            self.raise_(
                LowStockDetected(
                    sku=self.sku,
                    current_available=self.available,
                    reorder_point=self.reorder_point,
                    detected_at=datetime.now(UTC),
                )
            )

    # -------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------
    def reserve(self, quantity, order_id=None):
        """Allocate ``quantity`` units. Leaves the record untouched on failure."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        available = self.available
        if quantity > available:
            raise InsufficientStock(f"Insufficient stock for {self.sku}: {available} available, {quantity} requested")

        now = datetime.now(UTC)
        self.allocated = (self.allocated or 0) + quantity
        self.updated_at = now
        self.raise_(
            StockReserved(
                sku=self.sku,
                order_id=order_id,
                quantity=quantity,
                previous_available=available,
                new_available=self.available,
                new_allocated=self.allocated,
                reserved_at=now,
            )
        )
        self._check_low_stock()

    def release(self, quantity, order_id=None, reason=None):
        """Return allocated units to available stock, never below zero allocated."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        released = min(quantity, self.allocated or 0)
        now = datetime.now(UTC)
        self.allocated = (self.allocated or 0) - released
        self.updated_at = now
        self.raise_(
            StockReleased(
                sku=self.sku,
                order_id=order_id,
                quantity=quantity,
                released_quantity=released,
                new_allocated=self.allocated,
                reason=reason,
                released_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Receiving
    # -------------------------------------------------------------------
    def receive(self, quantity, batch_number, lot_number=None, expiry_date=None, reference=None):
        """Receive goods into stock and record the batch. Returns the new batch."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if not batch_number:
            raise ValidationError({"batch_number": ["Batch number is required"]})

        now = datetime.now(UTC)
        previous_on_hand = self.on_hand or 0
        batch = Batch(
            id=str(uuid4()),
            batch_number=batch_number,
            lot_number=lot_number,
            expiry_date=expiry_date,
            quantity=quantity,
            compliance_status=ComplianceStatus.PENDING_REVIEW.value,
            received_date=now.date(),
            sequence=len(self.batches or []),
        )
        self.add_batches(batch)
        self.on_hand = previous_on_hand + quantity
        self.updated_at = now
        self.raise_(
            StockReceived(
                sku=self.sku,
                batch_id=str(batch.id),
                batch_number=batch_number,
                lot_number=lot_number,
                expiry_date=expiry_date,
                quantity=quantity,
                previous_on_hand=previous_on_hand,
                new_on_hand=self.on_hand,
                reference=reference,
                received_at=now,
            )
        )
        return batch

    # -------------------------------------------------------------------
    # Batch compliance
    # -------------------------------------------------------------------
    def update_batch_compliance(self, batch_number, status):
        """Change a batch's compliance status, the only mutable batch attribute."""
        try:
            new_status = ComplianceStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown compliance status: {status}"]}) from None

        batch = next((b for b in (self.batches or []) if b.batch_number == batch_number), None)
        if batch is None:
            raise ValidationError({"batch_number": [f"Batch {batch_number} not found for {self.sku}"]})

        previous = batch.compliance_status
        if previous == new_status.value:
            return

        now = datetime.now(UTC)
        batch.compliance_status = new_status.value
        self.updated_at = now
        self.raise_(
            BatchComplianceUpdated(
                sku=self.sku,
                batch_number=batch_number,
                previous_status=previous,
                new_status=new_status.value,
                updated_at=now,
            )
        )

    def expired_batches(self, as_of: date | None = None) -> list:
        as_of = as_of or datetime.now(UTC).date()
        return [b for b in self.ordered_batches() if b.expiry_date and b.expiry_date < as_of]
