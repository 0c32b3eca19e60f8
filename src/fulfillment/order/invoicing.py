"""Invoicing — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.order.order import SalesOrder


@fulfillment.command(part_of="SalesOrder")
class IssueInvoice:
    order_id = Identifier(required=True)
    invoice_number = String(max_length=50)


@fulfillment.command_handler(part_of=SalesOrder)
class InvoicingHandler:
    @handle(IssueInvoice)
    def issue_invoice(self, command):
        repo = current_domain.repository_for(SalesOrder)
        order = repo.get_known(command.order_id)

        invoice_number = command.invoice_number or f"INV-{order.order_number}"
        order.issue_invoice(invoice_number)
        repo.add(order)

        logger.info(
            "Invoice issued",
            order_id=str(order.id),
            invoice_number=invoice_number,
            amount=order.total_amount,
        )
        return invoice_number
