"""Operation cancellation — command and handler.

Cancels an operation and every item not yet completed. Cancelling an
already-cancelled operation is a no-op.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.operation.operation import Operation
from warehouse.tenancy import tenant_transaction

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="Operation")
class CancelOperation:
    """Cancel an operation that is not completed."""

    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    reason = String(max_length=500)
    user_id = Identifier()


@warehouse.command_handler(part_of=Operation)
class CancelOperationHandler:
    @handle(CancelOperation)
    def cancel_operation(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Operation)
            op = repo.get_for_tenant(command.tenant_id, command.operation_id)
            if op.cancel(command.reason, cancelled_by=command.user_id):
                repo.add(op)
                logger.info("Operation cancelled", operation_id=str(op.id), reason=command.reason)
            else:
                logger.info("Operation already cancelled", operation_id=str(op.id))
        return op.status
