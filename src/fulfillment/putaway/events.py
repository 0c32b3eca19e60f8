"""Domain events for the PutawayTask aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="PutawayTask")
class PutawayTaskCreated:
    """Received goods are waiting at the dock to be put away."""

    __version__ = 1

    task_id = Identifier(required=True)
    receipt_id = Identifier(required=True)
    sku = String(required=True)
    quantity = Integer(required=True)
    source_location = String(required=True)
    suggested_location = String(required=True)
    created_at = DateTime(required=True)


@fulfillment.event(part_of="PutawayTask")
class PutawayCompleted:
    """Goods were moved to their storage location."""

    __version__ = 1

    task_id = Identifier(required=True)
    sku = String(required=True)
    quantity = Integer(required=True)
    location = String(required=True)
    completed_at = DateTime(required=True)
