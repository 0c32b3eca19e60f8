"""Order intake — command and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import OrderPriority, SalesChannel, SalesOrder


@fulfillment.command(part_of="SalesOrder")
class CreateOrder:
    order_number = String(required=True, max_length=50)
    customer = String(required=True, max_length=255)
    lines = Text(required=True)  # JSON list of {sku, quantity, unit_price, name?}
    priority = String(choices=OrderPriority, default=OrderPriority.NORMAL.value)
    channel = String(choices=SalesChannel, default=SalesChannel.DIRECT.value)
    shipping_address = String(max_length=500)


@fulfillment.command_handler(part_of=SalesOrder)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        repo = current_domain.repository_for(SalesOrder)
        if repo.by_order_number(command.order_number) is not None:
            raise ValidationError({"order_number": [f"Order {command.order_number} already exists"]})

        order = SalesOrder.create(
            order_number=command.order_number,
            customer=command.customer,
            lines_data=json.loads(command.lines),
            priority=command.priority,
            shipping_address=command.shipping_address,
            channel=command.channel,
        )
        repo.add(order)

        logger.info(
            "Order created",
            order_id=str(order.id),
            order_number=order.order_number,
            line_count=len(order.lines),
        )
        return str(order.id)
