"""Batch compliance review — command and handler."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.stock.stock import ComplianceStatus, SkuRecord


@fulfillment.command(part_of="SkuRecord")
class UpdateBatchCompliance:
    """Set the compliance verdict for a received batch."""

    sku = String(required=True, max_length=50)
    batch_number = String(required=True, max_length=50)
    status = String(required=True, choices=ComplianceStatus)


@fulfillment.command_handler(part_of=SkuRecord)
class BatchComplianceHandler:
    @handle(UpdateBatchCompliance)
    def update_batch_compliance(self, command):
        repo = current_domain.repository_for(SkuRecord)
        record = repo.get_known(command.sku)
        record.update_batch_compliance(command.batch_number, command.status)
        repo.add(record)
