"""Goods receiving — command and handler.

A receipt is one unit of work: the ledger gains on-hand stock and a
Pending_Review batch, exactly one putaway task is created pointing from the
receiving dock to the SKU's home location, and the purchase order (when one
is referenced) records the receipt. Any failure rolls all of it back.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Date, Integer, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.purchasing.purchase_order import PurchaseOrder
from fulfillment.putaway.putaway import PutawayPriority, PutawayTask
from fulfillment.settings import get_settings
from fulfillment.stock.stock import SkuRecord


@fulfillment.command(part_of="SkuRecord")
class ReceiveGoods:
    """Record goods arriving at the receiving dock."""

    sku = String(required=True, max_length=50)
    quantity = Integer(required=True)
    batch_number = String(required=True, max_length=50)
    lot_number = String(max_length=50)
    expiry_date = Date()
    reference = String(max_length=255)  # Receiving document number
    po_number = String(max_length=50)
    receiving_dock = String(max_length=100)


@fulfillment.command_handler(part_of=SkuRecord)
class ReceiveGoodsHandler:
    @handle(ReceiveGoods)
    def receive_goods(self, command):
        repo = current_domain.repository_for(SkuRecord)
        record = repo.get_known(command.sku)

        po = None
        if command.po_number:
            po_repo = current_domain.repository_for(PurchaseOrder)
            try:
                po = po_repo.get(command.po_number)
            except ObjectNotFoundError:
                raise ValidationError({"po_number": [f"Purchase order not found: {command.po_number}"]}) from None
            po.record_receipt(command.sku, command.quantity)
            po_repo.add(po)

        # Restocking a SKU that is already at its reorder point jumps the putaway queue
        was_low = record.available <= (record.reorder_point or 0)

        batch = record.receive(
            quantity=command.quantity,
            batch_number=command.batch_number,
            lot_number=command.lot_number,
            expiry_date=command.expiry_date,
            reference=command.reference or command.po_number,
        )
        repo.add(record)

        task = PutawayTask.for_receipt(
            receipt_id=str(batch.id),
            sku=record.sku,
            quantity=command.quantity,
            batch_number=command.batch_number,
            source_location=command.receiving_dock or get_settings().receiving_dock,
            suggested_location=record.location,
            product_name=record.name,
            po_number=command.po_number,
            priority=PutawayPriority.HIGH.value if was_low else PutawayPriority.NORMAL.value,
        )
        current_domain.repository_for(PutawayTask).add(task)

        logger.info(
            "Goods received",
            sku=record.sku,
            quantity=command.quantity,
            batch_number=command.batch_number,
            new_on_hand=record.on_hand,
            putaway_task_id=str(task.id),
        )
        return str(batch.id)
