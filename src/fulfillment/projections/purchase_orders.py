"""Purchase order receipt progress."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from fulfillment.errors import UnknownOrder
from fulfillment.purchasing.purchase_order import PurchaseOrder


def purchase_order_progress(po_number: str) -> dict:
    try:
        po = current_domain.repository_for(PurchaseOrder).get(po_number)
    except ObjectNotFoundError:
        raise UnknownOrder(f"Purchase order not found: {po_number}") from None

    lines = [
        {
            "sku": ln.sku,
            "name": ln.name,
            "expected_quantity": ln.expected_quantity,
            "received_quantity": ln.received_quantity,
            "status": ln.status,
        }
        for ln in sorted(po.lines, key=lambda ln: ln.sku)
    ]
    expected = sum(ln["expected_quantity"] for ln in lines)
    received = sum(min(ln["received_quantity"], ln["expected_quantity"]) for ln in lines)
    return {
        "po_number": po.po_number,
        "supplier": po.supplier,
        "expected_date": po.expected_date,
        "status": po.status,
        "lines": lines,
        "percent_received": round(100.0 * received / expected, 1) if expected else 0.0,
    }
