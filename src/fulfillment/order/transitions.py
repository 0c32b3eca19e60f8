"""Order lifecycle transitions — commands and handlers.

The engine holds the order lock while these run, and has already reserved
stock before ``ReleaseOrder`` is processed.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.errors import IncompletePacking
from fulfillment.order.order import SalesOrder
from fulfillment.packing.session import PackingSession


@fulfillment.command(part_of="SalesOrder")
class ReleaseOrder:
    order_id = Identifier(required=True)


@fulfillment.command(part_of="SalesOrder")
class RecordValidationFailure:
    order_id = Identifier(required=True)
    check = String(required=True, max_length=50)
    outcome = String(required=True, max_length=50)
    reasons = Text(required=True)  # JSON list of strings


@fulfillment.command(part_of="SalesOrder")
class ShipOrder:
    order_id = Identifier(required=True)


@fulfillment.command_handler(part_of=SalesOrder)
class OrderTransitionHandler:
    @handle(ReleaseOrder)
    def release_order(self, command):
        repo = current_domain.repository_for(SalesOrder)
        order = repo.get_known(command.order_id)
        order.release_to_warehouse()
        repo.add(order)

        logger.info(
            "Order released to warehouse",
            order_id=str(order.id),
            order_number=order.order_number,
        )
        return order.status

    @handle(RecordValidationFailure)
    def record_validation_failure(self, command):
        repo = current_domain.repository_for(SalesOrder)
        order = repo.get_known(command.order_id)
        order.record_validation_failure(
            check=command.check,
            outcome=command.outcome,
            reasons=json.loads(command.reasons),
        )
        repo.add(order)

        logger.info(
            "Order validation failed",
            order_id=str(order.id),
            check=command.check,
            outcome=command.outcome,
        )

    @handle(ShipOrder)
    def ship_order(self, command):
        repo = current_domain.repository_for(SalesOrder)
        order = repo.get_known(command.order_id)
        order.assert_can_ship()

        session_repo = current_domain.repository_for(PackingSession)
        try:
            session = session_repo.get(str(order.id))
        except ObjectNotFoundError:
            raise IncompletePacking(f"No packing session open for order {order.order_number}") from None
        if not session.is_open:
            raise IncompletePacking(f"No packing session open for order {order.order_number}")

        missing = session.missing_skus()
        if missing:
            raise IncompletePacking(f"Items not verified: {', '.join(missing)}")

        order.mark_shipped()
        repo.add(order)

        session.close()
        session_repo.add(session)

        logger.info(
            "Order shipped",
            order_id=str(order.id),
            order_number=order.order_number,
        )
        return order.status
