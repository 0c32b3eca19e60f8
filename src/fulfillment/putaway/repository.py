"""Repository for the PutawayTask aggregate."""

from fulfillment.domain import fulfillment
from fulfillment.putaway.putaway import PutawayStatus, PutawayTask


@fulfillment.repository(part_of=PutawayTask)
class PutawayTaskRepository:
    def pending(self) -> list[PutawayTask]:
        """Open tasks, oldest first."""
        tasks = self._dao.query.filter(status=PutawayStatus.PENDING.value).all().items
        return sorted(tasks, key=lambda t: (t.created_at, str(t.id)))

    def for_receipt(self, receipt_id: str) -> list[PutawayTask]:
        return self._dao.query.filter(receipt_id=str(receipt_id)).all().items
