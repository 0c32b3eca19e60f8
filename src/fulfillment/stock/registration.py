"""SKU registration — command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.stock.stock import SkuRecord


@fulfillment.command(part_of="SkuRecord")
class RegisterSku:
    """Add a SKU to the ledger with its home location and opening balance."""

    sku = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    location = String(required=True, max_length=100)
    on_hand = Integer(default=0)
    reorder_point = Integer(default=0)
    unit_price = Float(default=0.0)
    category = String(max_length=100)


@fulfillment.command_handler(part_of=SkuRecord)
class RegisterSkuHandler:
    @handle(RegisterSku)
    def register_sku(self, command):
        repo = current_domain.repository_for(SkuRecord)
        if repo.find(command.sku) is not None:
            raise ValidationError({"sku": [f"SKU {command.sku} is already registered"]})

        record = SkuRecord.register(
            sku=command.sku,
            name=command.name,
            location=command.location,
            on_hand=command.on_hand,
            reorder_point=command.reorder_point,
            unit_price=command.unit_price,
            category=command.category,
        )
        repo.add(record)
        logger.info("SKU registered", sku=record.sku, location=record.location, on_hand=record.on_hand)
        return record.sku
