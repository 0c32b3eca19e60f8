"""Domain events for the PurchaseOrder aggregate."""

from protean.fields import DateTime, Integer, String

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="PurchaseOrder")
class PurchaseOrderCreated:
    """A purchase order was raised with a supplier."""

    __version__ = 1

    po_number = String(required=True)
    supplier = String(required=True)
    line_count = Integer(required=True)
    created_at = DateTime(required=True)


@fulfillment.event(part_of="PurchaseOrder")
class PurchaseOrderReceiptRecorded:
    """Goods were received against a purchase order line."""

    __version__ = 1

    po_number = String(required=True)
    sku = String(required=True)
    quantity = Integer(required=True)
    line_received_quantity = Integer(required=True)
    status = String(required=True)
    recorded_at = DateTime(required=True)
