"""Package contents — add and remove items.

The quantity available to pack for an operation item is its processed
quantity minus what the operation's active packages already hold. Each
change also bumps the operation's packing revision, so two packers working on
the same operation at once collide on its version and the loser is retried
against fresh quantities.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.operation.operation import Operation, OperationStatus
from warehouse.packaging.package import Package
from warehouse.tenancy import tenant_transaction

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="Package")
class AddPackageItem:
    """Put a fulfilled quantity of an operation item into an open package."""

    tenant_id = Identifier(required=True)
    package_id = Identifier(required=True)
    operation_item_id = Identifier(required=True)
    quantity = Integer(required=True)
    serial_id = Identifier()
    user_id = Identifier()


@warehouse.command(part_of="Package")
class RemovePackageItem:
    """Take a line out of an open package."""

    tenant_id = Identifier(required=True)
    package_id = Identifier(required=True)
    package_item_id = Identifier(required=True)
    user_id = Identifier()


def available_to_pack(tenant_id: str, package: Package, operation_item) -> int:
    """Processed quantity of ``operation_item`` not yet held by any active package."""
    packed = current_domain.repository_for(Package).packed_quantities(
        tenant_id, package.operation_id, excluding=str(package.id)
    )
    already_packed = packed.get(str(operation_item.id), 0) + package.packed_quantity_for(operation_item.id)
    return (operation_item.processed_quantity or 0) - already_packed


@warehouse.command_handler(part_of=Package)
class PackageContentsHandler:
    @handle(AddPackageItem)
    def add_item(self, command):
        with tenant_transaction(command.tenant_id):
            package_repo = current_domain.repository_for(Package)
            operation_repo = current_domain.repository_for(Operation)

            package = package_repo.get_for_tenant(command.tenant_id, command.package_id)
            op = operation_repo.get_for_tenant(command.tenant_id, package.operation_id)
            if op.status == OperationStatus.CANCELLED.value:
                raise ValidationError({"operation_id": ["Cannot pack items of a cancelled operation"]})

            try:
                operation_item = op.find_item(command.operation_item_id)
            except ObjectNotFoundError:
                raise ObjectNotFoundError(
                    f"Item {command.operation_item_id} does not belong to operation {op.id}"
                ) from None

            package_item = package.pack_item(
                operation_item,
                command.quantity,
                available_to_pack(command.tenant_id, package, operation_item),
                serial_id=command.serial_id,
                added_by=command.user_id,
            )
            op.record_packing_activity(command.user_id)
            package_repo.add(package)
            operation_repo.add(op)

        logger.info(
            "Item packed",
            package_id=str(package.id),
            operation_item_id=str(command.operation_item_id),
            quantity=command.quantity,
        )
        return str(package_item.id)

    @handle(RemovePackageItem)
    def remove_item(self, command):
        with tenant_transaction(command.tenant_id):
            package_repo = current_domain.repository_for(Package)
            operation_repo = current_domain.repository_for(Operation)

            package = package_repo.get_for_tenant(command.tenant_id, command.package_id)
            removed = package.unpack_item(command.package_item_id)
            op = operation_repo.get_for_tenant(command.tenant_id, package.operation_id)
            op.record_packing_activity(command.user_id)
            package_repo.add(package)
            operation_repo.add(op)

        logger.info(
            "Item unpacked",
            package_id=str(package.id),
            package_item_id=str(command.package_item_id),
            quantity=removed.quantity,
        )
        return str(package.id)
