"""Pick confirmation — the location + SKU scan gate.

A pick is recorded only when the scanned location is the SKU's storage
location and the scanned SKU is the line's SKU. Anything else is a
``MismatchError`` and changes nothing.
"""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.errors import MismatchError, UnknownTask
from fulfillment.order.order import OrderStatus, SalesOrder
from fulfillment.picking.tasks import parse_task_id
from fulfillment.stock.stock import SkuRecord


@fulfillment.command(part_of="SalesOrder")
class ConfirmPick:
    task_id = String(required=True, max_length=100)
    scanned_location = String(max_length=100)
    scanned_sku = String(max_length=50)


@fulfillment.command_handler(part_of=SalesOrder)
class PickConfirmationHandler:
    @handle(ConfirmPick)
    def confirm_pick(self, command):
        order_id, line_index = parse_task_id(command.task_id)
        repo = current_domain.repository_for(SalesOrder)
        order = repo.get_known(order_id)
        line = order.line(line_index)

        if line.is_picked:
            return False
        if order.current_status != OrderStatus.WAREHOUSE_PICK:
            raise UnknownTask(f"No picking task {command.task_id}: order is {order.status}")

        record = current_domain.repository_for(SkuRecord).find(line.sku)
        if record is None or not record.location:
            raise MismatchError(f"No storage location on record for {line.sku}; pick cannot be verified")
        expected_location = record.location

        mismatches = []
        if command.scanned_location != expected_location:
            mismatches.append(f"Wrong location: expected {expected_location}, scanned {command.scanned_location}")
        if command.scanned_sku != line.sku:
            mismatches.append(f"Wrong item: expected {line.sku}, scanned {command.scanned_sku}")
        if mismatches:
            logger.warning(
                "Pick scan mismatch",
                task_id=command.task_id,
                scanned_location=command.scanned_location,
                scanned_sku=command.scanned_sku,
            )
            raise MismatchError(*mismatches)

        changed = order.record_pick(line_index, expected_location)
        repo.add(order)

        logger.info(
            "Line picked",
            order_id=str(order.id),
            line_index=line_index,
            sku=line.sku,
            all_picked=order.all_lines_picked,
        )
        return changed
