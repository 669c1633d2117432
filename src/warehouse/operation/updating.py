"""Operation details update — command and handler."""

import json

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.operation.operation import Operation
from warehouse.tenancy import tenant_transaction


@warehouse.command(part_of="Operation")
class UpdateOperation:
    """Edit the details of an operation."""

    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    changes = Text(required=True)  # JSON dict of field -> value
    user_id = Identifier()


@warehouse.command_handler(part_of=Operation)
class UpdateOperationHandler:
    @handle(UpdateOperation)
    def update_operation(self, command):
        changes = json.loads(command.changes) if isinstance(command.changes, str) else command.changes
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Operation)
            op = repo.get_for_tenant(command.tenant_id, command.operation_id)
            op.update_details(changes or {}, updated_by=command.user_id)
            repo.add(op)
        return str(op.id)
