"""Package creation — command and handler.

Packages can be opened for any packing operation that was not cancelled,
including one whose items are all processed.
The folio comes from the folio generator; the barcode is derived from it.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from warehouse.collaborators import get_folio_generator
from warehouse.domain import warehouse
from warehouse.operation.operation import Operation, OperationStatus, OperationType
from warehouse.packaging.package import Package
from warehouse.tenancy import tenant_transaction

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="Package")
class CreatePackage:
    """Open a new package for a packing operation."""

    tenant_id = Identifier(required=True)
    operation_id = Identifier(required=True)
    notes = Text()
    user_id = Identifier()


@warehouse.command_handler(part_of=Package)
class CreatePackageHandler:
    @handle(CreatePackage)
    def create_package(self, command):
        with tenant_transaction(command.tenant_id):
            op = current_domain.repository_for(Operation).get_for_tenant(command.tenant_id, command.operation_id)
            if op.operation_type != OperationType.PACKING.value:
                raise ValidationError({"operation_id": ["Packages can only be created for packing operations"]})
            if op.status == OperationStatus.CANCELLED.value:
                raise ValidationError({"operation_id": ["Cannot create a package for a cancelled operation"]})

            folio = get_folio_generator().generate_folio(command.tenant_id, "package")
            package = Package.create(
                tenant_id=command.tenant_id,
                operation_id=str(op.id),
                folio=folio,
                notes=command.notes,
                created_by=command.user_id,
            )
            current_domain.repository_for(Package).add(package)

        logger.info("Package created", package_id=str(package.id), operation_id=str(op.id), folio=folio)
        return str(package.id)
