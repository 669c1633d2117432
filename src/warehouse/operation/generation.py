"""Operation chain generation from source documents — command and handler.

The chain generator collaborator decides which operations a purchase order or
sale produces. This handler only runs it inside the tenant transaction and
returns its result unchanged.
"""

from enum import Enum

import structlog
from protean import handle
from protean.fields import Identifier, String

from warehouse.collaborators import get_chain_generator
from warehouse.domain import warehouse
from warehouse.operation.operation import Operation
from warehouse.tenancy import with_tenant_transaction

logger = structlog.get_logger(__name__)


class DocumentType(Enum):
    PURCHASE_ORDER = "purchase_order"
    SALE = "sale"


@warehouse.command(part_of="Operation")
class GenerateOperationsFromDocument:
    """Create the operation chain for a purchase order or a sale."""

    tenant_id = Identifier(required=True)
    document_type = String(required=True, max_length=50, choices=DocumentType)
    document_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    user_id = Identifier()


@warehouse.command_handler(part_of=Operation)
class GenerationHandler:
    @handle(GenerateOperationsFromDocument)
    def generate_operations(self, command):
        generator = get_chain_generator()
        if command.document_type == DocumentType.PURCHASE_ORDER.value:
            create_chain = generator.create_operations_from_purchase_order
        else:
            create_chain = generator.create_operations_from_sale

        operation_id = with_tenant_transaction(
            command.tenant_id,
            lambda _uow: create_chain(
                command.document_id,
                command.branch_id,
                command.user_id,
                command.tenant_id,
            ),
        )
        logger.info(
            "Operations generated from document",
            document_type=command.document_type,
            document_id=str(command.document_id),
            operation_id=operation_id,
        )
        return operation_id
