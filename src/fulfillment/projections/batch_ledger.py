"""Batch ledger — every received batch with its compliance status."""

from protean.utils.globals import current_domain

from fulfillment.stock.stock import ComplianceStatus, SkuRecord


def batch_ledger(sku: str | None = None) -> dict:
    repo = current_domain.repository_for(SkuRecord)
    records = [repo.get_known(sku)] if sku else repo.all_records()

    rows = []
    for record in records:
        expired = {str(b.id) for b in record.expired_batches()}
        for batch in record.ordered_batches():
            rows.append(
                {
                    "sku": record.sku,
                    "product_name": record.name,
                    "batch_id": str(batch.id),
                    "batch_number": batch.batch_number,
                    "lot_number": batch.lot_number,
                    "expiry_date": batch.expiry_date,
                    "expired": str(batch.id) in expired,
                    "quantity": batch.quantity,
                    "compliance_status": batch.compliance_status,
                    "received_date": batch.received_date,
                }
            )

    counts = {status.value: 0 for status in ComplianceStatus}
    for row in rows:
        counts[row["compliance_status"]] += 1

    return {
        "batches": rows,
        "compliance_counts": counts,
        "expired_count": sum(1 for row in rows if row["expired"]),
    }
