"""Order status view."""

from protean.utils.globals import current_domain

from fulfillment.order.order import OrderStatus, SalesOrder


def _summary(order) -> dict:
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "customer": order.customer,
        "channel": order.channel,
        "priority": order.priority,
        "status": order.status,
        "total_amount": order.total_amount,
        "created_at": order.created_at,
    }


def order_status(order_id: str) -> dict:
    order = current_domain.repository_for(SalesOrder).get_known(order_id)
    view = _summary(order)
    view.update(
        {
            "shipping_address": order.shipping_address,
            "last_failed_check": order.last_failed_check,
            "last_failure_reasons": order.failure_reasons,
            "invoice_number": order.invoice_number,
            "released_at": order.released_at,
            "shipped_at": order.shipped_at,
            "invoiced_at": order.invoiced_at,
            "lines": [
                {
                    "line_index": ln.line_index,
                    "sku": ln.sku,
                    "name": ln.name,
                    "quantity": ln.quantity,
                    "unit_price": ln.unit_price,
                    "pick_status": ln.pick_status,
                    "picked_location": ln.picked_location,
                }
                for ln in order.ordered_lines()
            ],
        }
    )
    return view


def orders_in_status(status: OrderStatus | str) -> list[dict]:
    return [_summary(o) for o in current_domain.repository_for(SalesOrder).in_status(OrderStatus(status))]
