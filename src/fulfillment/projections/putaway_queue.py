"""Putaway queue — open putaway tasks, High priority first."""

from protean.utils.globals import current_domain

from fulfillment.putaway.putaway import PutawayPriority, PutawayTask


def pending_putaway_tasks() -> list[dict]:
    tasks = current_domain.repository_for(PutawayTask).pending()
    # Stable sort keeps oldest-first within each priority
    tasks = sorted(tasks, key=lambda t: t.priority != PutawayPriority.HIGH.value)
    return [
        {
            "task_id": str(t.id),
            "receipt_id": str(t.receipt_id),
            "po_number": t.po_number,
            "sku": t.sku,
            "product_name": t.product_name,
            "batch_number": t.batch_number,
            "quantity": t.quantity,
            "source_location": t.source_location,
            "suggested_location": t.suggested_location,
            "priority": t.priority,
            "created_at": t.created_at,
        }
        for t in tasks
    ]
