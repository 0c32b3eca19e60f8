"""Stock reservation — commands and handler.

These handlers do no locking of their own. Callers that need per-SKU
linearizability (the engine) hold the SKU lock around ``process`` so the
read-check-write and the commit happen inside the same critical section.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.stock.stock import SkuRecord


@fulfillment.command(part_of="SkuRecord")
class ReserveStock:
    """Allocate units of a SKU, optionally against an order."""

    sku = String(required=True, max_length=50)
    quantity = Integer(required=True)
    order_id = Identifier()


@fulfillment.command(part_of="SkuRecord")
class ReleaseStock:
    """Return allocated units of a SKU to available stock."""

    sku = String(required=True, max_length=50)
    quantity = Integer(required=True)
    order_id = Identifier()
    reason = String(max_length=255)


@fulfillment.command_handler(part_of=SkuRecord)
class ReservationHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        repo = current_domain.repository_for(SkuRecord)
        record = repo.get_known(command.sku)
        record.reserve(command.quantity, order_id=command.order_id)
        repo.add(record)
        return record.available

    @handle(ReleaseStock)
    def release_stock(self, command):
        repo = current_domain.repository_for(SkuRecord)
        record = repo.get_known(command.sku)
        record.release(command.quantity, order_id=command.order_id, reason=command.reason)
        repo.add(record)
        return record.available
