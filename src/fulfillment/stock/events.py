"""Domain events for the SkuRecord aggregate.

Every ledger movement is recorded as a versioned, immutable fact carrying the
before/after quantities so downstream consumers never need to re-read the
record to understand what changed.
"""

from protean.fields import Date, DateTime, Identifier, Integer, String

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="SkuRecord")
class SkuRegistered:
    """A new SKU was added to the ledger."""

    __version__ = 1

    sku = String(required=True)
    name = String(required=True)
    location = String(required=True)
    on_hand = Integer(required=True)
    reorder_point = Integer(required=True)
    registered_at = DateTime(required=True)


@fulfillment.event(part_of="SkuRecord")
class StockReceived:
    """Goods were received, increasing on-hand and adding a batch."""

    __version__ = 1

    sku = String(required=True)
    batch_id = Identifier(required=True)
    batch_number = String(required=True)
    lot_number = String()
    expiry_date = Date()
    quantity = Integer(required=True)
    previous_on_hand = Integer(required=True)
    new_on_hand = Integer(required=True)
    reference = String()
    received_at = DateTime(required=True)


@fulfillment.event(part_of="SkuRecord")
class StockReserved:
    """Units were allocated against an order."""

    __version__ = 1

    sku = String(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    previous_available = Integer(required=True)
    new_available = Integer(required=True)
    new_allocated = Integer(required=True)
    reserved_at = DateTime(required=True)


@fulfillment.event(part_of="SkuRecord")
class StockReleased:
    """Allocated units were returned to available stock."""

    __version__ = 1

    sku = String(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    released_quantity = Integer(required=True)  # may be less than requested (floored at zero)
    new_allocated = Integer(required=True)
    reason = String()
    released_at = DateTime(required=True)


@fulfillment.event(part_of="SkuRecord")
class BatchComplianceUpdated:
    """The compliance status of a received batch changed."""

    __version__ = 1

    sku = String(required=True)
    batch_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    updated_at = DateTime(required=True)


@fulfillment.event(part_of="SkuRecord")
class LowStockDetected:
    """Available stock dropped to or below the reorder point."""

    __version__ = 1

    sku = String(required=True)
    current_available = Integer(required=True)
    reorder_point = Integer(required=True)
    detected_at = DateTime(required=True)
