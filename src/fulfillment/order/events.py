"""SalesOrder domain events — immutable facts about order state changes."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="SalesOrder")
class OrderCreated:
    """A sales order was taken in and confirmed."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer = String(required=True)
    priority = String(required=True)
    lines = Text(required=True)  # JSON list of line dicts
    total_amount = Float(required=True)
    created_at = DateTime(required=True)


@fulfillment.event(part_of="SalesOrder")
class OrderValidationFailed:
    """The validation pipeline stopped the order; it stays retryable."""

    __version__ = 1

    order_id = Identifier(required=True)
    check = String(required=True)
    outcome = String(required=True)  # Failed or Indeterminate
    reasons = Text(required=True)  # JSON list of strings
    failed_at = DateTime(required=True)


@fulfillment.event(part_of="SalesOrder")
class OrderReleasedToWarehouse:
    """Validation passed and stock was reserved; picking may begin."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    line_count = Integer(required=True)
    released_at = DateTime(required=True)


@fulfillment.event(part_of="SalesOrder")
class LinePicked:
    """A pick was confirmed by location and SKU scan."""

    __version__ = 1

    order_id = Identifier(required=True)
    line_index = Integer(required=True)
    sku = String(required=True)
    quantity = Integer(required=True)
    location = String(required=True)
    picked_at = DateTime(required=True)


@fulfillment.event(part_of="SalesOrder")
class OrderShipped:
    """Packing was verified and the order left the warehouse."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    shipped_at = DateTime(required=True)


@fulfillment.event(part_of="SalesOrder")
class OrderInvoiced:
    """An invoice was issued for a shipped order."""

    __version__ = 1

    order_id = Identifier(required=True)
    invoice_number = String(required=True)
    amount = Float(required=True)
    invoiced_at = DateTime(required=True)
