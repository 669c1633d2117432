"""Item fulfillment — commands and handler.

Applies processed quantities to operation items, one at a time or as a
batch, and cancels single items. The operation status is re-derived by the
aggregate after every change.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.operation.operation import Operation
from warehouse.tenancy import tenant_transaction

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="Operation")
class ProcessItem:
    """Add a processed quantity to one item of an operation."""

    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)
    destination_location_id = Identifier()
    user_id = Identifier()


@warehouse.command(part_of="Operation")
class CompleteOperation:
    """Apply processed quantities to several items in one transaction."""

    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    items = Text(required=True)  # JSON list of {"item_id", "quantity", "destination_location_id"}
    user_id = Identifier()


@warehouse.command(part_of="Operation")
class CancelItem:
    """Cancel a single item of an operation."""

    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    item_id = Identifier(required=True)
    user_id = Identifier()


@warehouse.command_handler(part_of=Operation)
class ProcessingHandler:
    @handle(ProcessItem)
    def process_item(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Operation)
            op = repo.get_for_tenant(command.tenant_id, command.operation_id)
            item = op.process_item(
                command.item_id,
                command.quantity,
                destination_location_id=command.destination_location_id,
                processed_by=command.user_id,
            )
            repo.add(op)
        logger.info(
            "Item processed",
            operation_id=str(op.id),
            item_id=str(item.id),
            quantity=command.quantity,
            item_status=item.status,
            operation_status=op.status,
        )
        return op.status

    @handle(CompleteOperation)
    def complete_operation(self, command):
        lines = json.loads(command.items) if isinstance(command.items, str) else command.items
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Operation)
            op = repo.get_for_tenant(command.tenant_id, command.operation_id)
            op.complete(lines or [], completed_by=command.user_id)
            repo.add(op)
        logger.info("Operation items applied", operation_id=str(op.id), lines=len(lines), status=op.status)
        return op.status

    @handle(CancelItem)
    def cancel_item(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Operation)
            op = repo.get_for_tenant(command.tenant_id, command.operation_id)
            if op.cancel_item(command.item_id, cancelled_by=command.user_id):
                repo.add(op)
        logger.info("Item cancelled", operation_id=str(op.id), item_id=str(command.item_id))
        return op.status
