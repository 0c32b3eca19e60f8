"""Picking board — grouped picking work, pack-ready orders, packing progress."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from fulfillment.order.order import OrderStatus, SalesOrder
from fulfillment.packing.session import PackingSession
from fulfillment.picking.grouping import group_tasks
from fulfillment.picking.tasks import generate_picking_tasks
from fulfillment.stock.stock import SkuRecord


def picking_tasks() -> list:
    orders = current_domain.repository_for(SalesOrder).in_status(OrderStatus.WAREHOUSE_PICK)
    locations = current_domain.repository_for(SkuRecord).locations()
    return generate_picking_tasks(orders, locations)


def grouped_picking_tasks(strategy) -> list:
    return group_tasks(picking_tasks(), strategy)


def pack_ready_orders() -> list[dict]:
    """Orders whose every line is picked, with the state of their packing session."""
    orders = current_domain.repository_for(SalesOrder).in_status(OrderStatus.WAREHOUSE_PICK)
    ready = []
    for order in orders:
        if not order.all_lines_picked:
            continue
        progress = packing_progress(str(order.id))
        ready.append(
            {
                "order_id": str(order.id),
                "order_number": order.order_number,
                "customer": order.customer,
                "priority": order.priority,
                "line_skus": sorted(order.line_skus),
                "session_open": progress["open"],
                "verified_count": len(progress["verified"]),
            }
        )
    return ready


def packing_progress(order_id: str) -> dict:
    try:
        session = current_domain.repository_for(PackingSession).get(str(order_id))
    except ObjectNotFoundError:
        session = None

    if session is None or not session.is_open:
        return {
            "order_id": str(order_id),
            "open": False,
            "expected": [],
            "verified": [],
            "missing": [],
            "complete": False,
        }

    return {
        "order_id": str(order_id),
        "open": True,
        "expected": session.expected,
        "verified": session.verified,
        "missing": session.missing_skus(),
        "complete": session.is_complete,
    }
