"""Purchase order creation — command and handler."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Date, String, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.purchasing.purchase_order import PurchaseOrder


@fulfillment.command(part_of="PurchaseOrder")
class CreatePurchaseOrder:
    """Raise a purchase order with a supplier."""

    po_number = String(required=True, max_length=50)
    supplier = String(required=True, max_length=255)
    expected_date = Date()
    lines = Text(required=True)  # JSON list of {sku, name, expected_quantity}


@fulfillment.command_handler(part_of=PurchaseOrder)
class CreatePurchaseOrderHandler:
    @handle(CreatePurchaseOrder)
    def create_purchase_order(self, command):
        repo = current_domain.repository_for(PurchaseOrder)
        try:
            repo.get(command.po_number)
        except ObjectNotFoundError:
            pass
        else:
            raise ValidationError({"po_number": [f"Purchase order {command.po_number} already exists"]})

        lines_data = json.loads(command.lines) if isinstance(command.lines, str) else command.lines
        po = PurchaseOrder.create(
            po_number=command.po_number,
            supplier=command.supplier,
            lines_data=lines_data,
            expected_date=command.expected_date,
        )
        repo.add(po)
        return po.po_number
