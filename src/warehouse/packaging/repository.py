"""Tenant-scoped repository for the Package aggregate."""

from protean.exceptions import ObjectNotFoundError

from warehouse.domain import warehouse
from warehouse.packaging.package import Package, PackageStatus


@warehouse.repository(part_of=Package)
class PackageRepository:
    def get_for_tenant(self, tenant_id: str, package_id: str) -> Package:
        package = self._dao.query.filter(id=str(package_id), tenant_id=str(tenant_id)).all().first
        if package is None:
            raise ObjectNotFoundError(f"Package {package_id} not found")
        return package

    def for_operation(self, tenant_id: str, operation_id: str, include_cancelled: bool = True) -> list[Package]:
        """Packages of an operation in creation order."""
        query = self._dao.query.filter(tenant_id=str(tenant_id), operation_id=str(operation_id))
        if not include_cancelled:
            query = query.exclude(status=PackageStatus.CANCELLED.value)
        return query.order_by("created_at").limit(None).all().items

    def packed_quantities(self, tenant_id: str, operation_id: str, excluding: str | None = None) -> dict[str, int]:
        """Units packed per operation item across the operation's active packages.

        ``excluding`` leaves one package out, so its in-memory contents can be
        counted by the caller instead of the persisted ones.
        """
        totals: dict[str, int] = {}
        for package in self.for_operation(tenant_id, operation_id, include_cancelled=False):
            if excluding and str(package.id) == str(excluding):
                continue
            for item in package.items or []:
                key = str(item.operation_item_id)
                totals[key] = totals.get(key, 0) + item.quantity
        return totals
