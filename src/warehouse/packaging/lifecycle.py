"""Package lifecycle — update, close, label, ship and cancel."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.operation.operation import Operation
from warehouse.packaging.package import Package
from warehouse.tenancy import tenant_transaction

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@warehouse.command(part_of="Package")
class UpdatePackage:
    tenant_id = Identifier(required=True)
    package_id = Identifier(required=True)
    weight_kg = Float(min_value=0)
    length_cm = Float(min_value=0)
    width_cm = Float(min_value=0)
    height_cm = Float(min_value=0)
    notes = Text()
    carrier = String(max_length=100)
    tracking_code = String(max_length=100)
    user_id = Identifier()


@warehouse.command(part_of="Package")
class ClosePackage:
    tenant_id = Identifier(required=True)
    package_id = Identifier(required=True)
    user_id = Identifier()


@warehouse.command(part_of="Package")
class LabelPackage:
    tenant_id = Identifier(required=True)
    package_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_code = String(max_length=100)
    user_id = Identifier()


@warehouse.command(part_of="Package")
class ShipPackage:
    tenant_id = Identifier(required=True)
    package_id = Identifier(required=True)
    user_id = Identifier()


@warehouse.command(part_of="Package")
class CancelPackage:
    tenant_id = Identifier(required=True)
    package_id = Identifier(required=True)
    reason = String(max_length=500)
    user_id = Identifier()


_UPDATE_FIELDS = ("weight_kg", "length_cm", "width_cm", "height_cm", "notes", "carrier", "tracking_code")


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------
@warehouse.command_handler(part_of=Package)
class PackageLifecycleHandler:
    @handle(UpdatePackage)
    def update_package(self, command):
        changes = {name: getattr(command, name) for name in _UPDATE_FIELDS}
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Package)
            package = repo.get_for_tenant(command.tenant_id, command.package_id)
            package.update_details(changes)
            repo.add(package)
        logger.info(
            "Package updated",
            package_id=str(package.id),
            fields=sorted(k for k, v in changes.items() if v is not None),
        )
        return str(package.id)

    @handle(ClosePackage)
    def close_package(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Package)
            package = repo.get_for_tenant(command.tenant_id, command.package_id)
            package.close(closed_by=command.user_id)
            repo.add(package)
        logger.info("Package closed", package_id=str(package.id), total_units=package.total_units)
        return package.status

    @handle(LabelPackage)
    def label_package(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Package)
            package = repo.get_for_tenant(command.tenant_id, command.package_id)
            package.label(carrier=command.carrier, tracking_code=command.tracking_code)
            repo.add(package)
        logger.info("Package labeled", package_id=str(package.id), carrier=package.carrier)
        return package.status

    @handle(ShipPackage)
    def ship_package(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Package)
            package = repo.get_for_tenant(command.tenant_id, command.package_id)
            package.ship(shipped_by=command.user_id)
            repo.add(package)
        logger.info("Package shipped", package_id=str(package.id), tracking_code=package.tracking_code)
        return package.status

    @handle(CancelPackage)
    def cancel_package(self, command):
        with tenant_transaction(command.tenant_id):
            repo = current_domain.repository_for(Package)
            package = repo.get_for_tenant(command.tenant_id, command.package_id)
            if package.cancel(command.reason):
                # Released quantities change what the operation has left to pack
                operation_repo = current_domain.repository_for(Operation)
                op = operation_repo.get_for_tenant(command.tenant_id, package.operation_id)
                op.record_packing_activity(command.user_id)
                repo.add(package)
                operation_repo.add(op)
                logger.info(
                    "Package cancelled",
                    package_id=str(package.id),
                    released_units=package.total_units,
                    reason=package.cancellation_reason,
                )
        return package.status
