"""Operation assignment and start — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.operation.operation import Operation
from warehouse.tenancy import tenant_transaction

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="Operation")
class AssignOperation:
    """Assign an operation to a warehouse user."""

    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    user_id = Identifier(required=True)


@warehouse.command(part_of="Operation")
class StartOperation:
    """Begin work on an operation."""

    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    user_id = Identifier()


@warehouse.command_handler(part_of=Operation)
class AssignmentHandler:
    @handle(AssignOperation)
    def assign_operation(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Operation)
            op = repo.get_for_tenant(command.tenant_id, command.operation_id)
            op.assign(command.user_id)
            repo.add(op)
        logger.info("Operation assigned", operation_id=str(op.id), assigned_to=str(command.user_id))
        return op.status

    @handle(StartOperation)
    def start_operation(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Operation)
            op = repo.get_for_tenant(command.tenant_id, command.operation_id)
            op.start(command.user_id)
            repo.add(op)
        logger.info("Operation started", operation_id=str(op.id), status=op.status)
        return op.status
