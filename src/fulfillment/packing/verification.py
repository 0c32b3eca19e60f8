"""Pack verification — commands and handlers for the packing checklist."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.errors import IncompletePacking, MismatchError, UnknownTask
from fulfillment.order.order import OrderStatus, SalesOrder
from fulfillment.packing.session import PackingSession


@fulfillment.command(part_of="PackingSession")
class ToggleVerified:
    order_id = Identifier(required=True)
    sku = String(required=True, max_length=50)


@fulfillment.command(part_of="PackingSession")
class CancelPackSession:
    order_id = Identifier(required=True)


@fulfillment.command_handler(part_of=PackingSession)
class PackVerificationHandler:
    @handle(ToggleVerified)
    def toggle_verified(self, command):
        order = current_domain.repository_for(SalesOrder).get_known(command.order_id)
        if order.current_status != OrderStatus.WAREHOUSE_PICK or not order.all_lines_picked:
            raise IncompletePacking(f"Order {order.order_number} is not ready for packing")
        if command.sku not in order.line_skus:
            raise MismatchError(f"SKU {command.sku} is not on order {order.order_number}")

        repo = current_domain.repository_for(PackingSession)
        try:
            session = repo.get(str(order.id))
        except ObjectNotFoundError:
            session = PackingSession.open(order.id, order.line_skus)
        else:
            if not session.is_open:
                session.reopen(order.line_skus)

        verified = session.toggle(command.sku)
        repo.add(session)

        logger.debug(
            "Pack item toggled",
            order_id=str(order.id),
            sku=command.sku,
            verified=verified,
        )
        return verified

    @handle(CancelPackSession)
    def cancel_pack_session(self, command):
        repo = current_domain.repository_for(PackingSession)
        try:
            session = repo.get(str(command.order_id))
        except ObjectNotFoundError:
            raise UnknownTask(f"No packing session for order {command.order_id}") from None
        if not session.is_open:
            raise UnknownTask(f"No packing session for order {command.order_id}")

        session.discard()
        repo.add(session)

        logger.info("Pack session discarded", order_id=str(command.order_id))
