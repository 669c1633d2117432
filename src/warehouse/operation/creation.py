"""Operation creation — command and handler.

Registers a manually created operation in draft. The folio is allocated by
the configured folio generator inside the same tenant transaction.
"""

import json

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from warehouse.collaborators import get_folio_generator
from warehouse.domain import warehouse
from warehouse.operation.operation import Operation, OperationType, OriginType
from warehouse.tenancy import tenant_transaction

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="Operation")
class CreateOperation:
    """Register a new warehouse operation with its demanded items."""

    tenant_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    operation_type = String(required=True, max_length=50, choices=OperationType)
    items = Text(required=True)  # JSON list of item dicts
    name = String(max_length=200)
    origin_type = String(max_length=50, choices=OriginType)
    origin_id = Identifier()
    origin_folio = String(max_length=50)
    source_location_id = Identifier()
    destination_location_id = Identifier()
    assigned_to = Identifier()
    priority = Integer(min_value=1)
    scheduled_date = DateTime()
    notes = Text()
    user_id = Identifier()


@warehouse.command_handler(part_of=Operation)
class CreateOperationHandler:
    @handle(CreateOperation)
    def create_operation(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Operation)
            if command.origin_type == OriginType.OPERATION.value and command.origin_id:
                # The predecessor must exist within the same tenant
                repo.get_for_tenant(command.tenant_id, command.origin_id)

            folio = get_folio_generator().generate_folio(command.tenant_id, command.operation_type)
            op = Operation.create(
                tenant_id=command.tenant_id,
                branch_id=command.branch_id,
                folio=folio,
                operation_type=command.operation_type,
                items_data=items_data,
                name=command.name,
                origin_type=command.origin_type,
                origin_id=command.origin_id,
                origin_folio=command.origin_folio,
                source_location_id=command.source_location_id,
                destination_location_id=command.destination_location_id,
                assigned_to=command.assigned_to,
                priority=command.priority,
                scheduled_date=command.scheduled_date,
                notes=command.notes,
                created_by=command.user_id,
            )
            repo.add(op)

        logger.info("Operation created", operation_id=str(op.id), folio=folio, operation_type=op.operation_type)
        return str(op.id)
