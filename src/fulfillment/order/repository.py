"""Repository for the SalesOrder aggregate."""

from protean.exceptions import ObjectNotFoundError

from fulfillment.domain import fulfillment
from fulfillment.errors import UnknownOrder
from fulfillment.order.order import OrderStatus, SalesOrder


@fulfillment.repository(part_of=SalesOrder)
class SalesOrderRepository:
    def get_known(self, order_id: str) -> SalesOrder:
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            raise UnknownOrder(f"Order not found: {order_id}") from None

    def by_order_number(self, order_number: str) -> SalesOrder | None:
        return self._dao.query.filter(order_number=order_number).first

    def in_status(self, status: OrderStatus) -> list[SalesOrder]:
        orders = self._dao.query.filter(status=status.value).all().items
        return sorted(orders, key=lambda o: (o.created_at, o.order_number))
