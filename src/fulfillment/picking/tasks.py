"""Picking task derivation.

Picking tasks are never stored. They are recomputed from the orders in
WAREHOUSE_PICK and the ledger's storage locations each time they are asked
for, so a task exists exactly while its line is unpicked.
"""

from dataclasses import dataclass

from fulfillment.errors import UnknownTask
from fulfillment.order.order import OrderStatus, PickStatus

UNKNOWN_ZONE = "Unknown"
UNKNOWN_LOCATION = "Unknown"


@dataclass(frozen=True)
class PickingTask:
    task_id: str
    order_id: str
    order_number: str
    line_index: int
    sku: str
    product_name: str
    quantity: int
    location: str
    zone: str
    priority: str
    status: str = PickStatus.PENDING.value


def derive_zone(location: str | None) -> str:
    """``"Zone A-12"`` → ``"Zone A"``. Locations without a dash are their own zone."""
    if not location:
        return UNKNOWN_ZONE
    return location.split("-")[0]


def make_task_id(order_id, line_index: int) -> str:
    return f"{order_id}:{line_index}"


def parse_task_id(task_id: str) -> tuple[str, int]:
    order_id, sep, index = (task_id or "").rpartition(":")
    if not sep or not order_id or not index.isdigit():
        raise UnknownTask(f"Malformed picking task id: {task_id}")
    return order_id, int(index)


def generate_picking_tasks(orders, locations: dict[str, str]) -> list[PickingTask]:
    """One task per unpicked line of every order in WAREHOUSE_PICK.

    Ordered by order creation time, then order number, then line index.
    """
    eligible = [o for o in orders if o.status == OrderStatus.WAREHOUSE_PICK.value]
    eligible.sort(key=lambda o: (o.created_at, o.order_number))

    tasks = []
    for order in eligible:
        for line in order.ordered_lines():
            if line.is_picked:
                continue
            location = locations.get(line.sku) or UNKNOWN_LOCATION
            tasks.append(
                PickingTask(
                    task_id=make_task_id(order.id, line.line_index),
                    order_id=str(order.id),
                    order_number=order.order_number,
                    line_index=line.line_index,
                    sku=line.sku,
                    product_name=line.name or line.sku,
                    quantity=line.quantity,
                    location=location,
                    zone=derive_zone(locations.get(line.sku)),
                    priority=order.priority,
                )
            )
    return tasks
