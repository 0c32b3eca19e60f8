"""Putaway confirmation — command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment, logger
from fulfillment.errors import UnknownTask
from fulfillment.putaway.putaway import PutawayTask


@fulfillment.command(part_of="PutawayTask")
class ConfirmPutaway:
    """Operator confirms the goods were moved to the suggested location."""

    task_id = Identifier(required=True)


@fulfillment.command_handler(part_of=PutawayTask)
class ConfirmPutawayHandler:
    @handle(ConfirmPutaway)
    def confirm_putaway(self, command):
        repo = current_domain.repository_for(PutawayTask)
        try:
            task = repo.get(command.task_id)
        except ObjectNotFoundError:
            raise UnknownTask(f"Putaway task not found: {command.task_id}") from None

        task.complete()
        repo.add(task)
        logger.info("Putaway completed", task_id=str(task.id), sku=task.sku, location=task.suggested_location)
