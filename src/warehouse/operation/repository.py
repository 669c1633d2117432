"""Tenant-scoped repository for the Operation aggregate.

Every lookup takes the tenant id explicitly and adds it to the query, so an
operation of another tenant is indistinguishable from a missing one.
"""

from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError

from warehouse.domain import warehouse
from warehouse.operation.operation import Operation


@dataclass
class OperationFilter:
    """Optional criteria for listing operations. Unset fields are ignored."""

    branch_id: str | None = None
    operation_type: str | None = None
    statuses: list[str] = field(default_factory=list)
    assigned_to: str | None = None
    origin_type: str | None = None
    origin_id: str | None = None
    limit: int | None = None

    def criteria(self) -> dict:
        """Build query keyword arguments for the fields that are set."""
        criteria = {}
        if self.branch_id:
            criteria["branch_id"] = self.branch_id
        if self.operation_type:
            criteria["operation_type"] = self.operation_type
        if self.statuses:
            criteria["status__in"] = list(self.statuses)
        if self.assigned_to:
            criteria["assigned_to"] = self.assigned_to
        if self.origin_type:
            criteria["origin_type"] = self.origin_type
        if self.origin_id:
            criteria["origin_id"] = self.origin_id
        return criteria


@warehouse.repository(part_of=Operation)
class OperationRepository:
    """Operation lookups that always filter by tenant."""

    def get_for_tenant(self, tenant_id: str, operation_id: str) -> Operation:
        """Fetch one operation of the tenant, or raise ObjectNotFoundError."""
        operation = self._dao.query.filter(id=str(operation_id), tenant_id=str(tenant_id)).all().first
        if operation is None:
            raise ObjectNotFoundError(f"Operation {operation_id} not found")
        return operation

    def list_for_tenant(self, tenant_id: str, filters: OperationFilter | None = None) -> list[Operation]:
        """List operations by priority (most urgent first), newest first within a priority."""
        filters = filters or OperationFilter()
        query = (
            self._dao.query.filter(tenant_id=str(tenant_id), **filters.criteria())
            .order_by(["priority", "-created_at"])
            .limit(filters.limit)
        )
        return query.all().items

    def find_by_origin(self, tenant_id: str, origin_type: str, origin_id: str) -> list[Operation]:
        """Operations created from the given origin document or predecessor."""
        return (
            self._dao.query.filter(
                tenant_id=str(tenant_id),
                origin_type=origin_type,
                origin_id=str(origin_id),
            )
            .order_by("created_at")
            .limit(None)
            .all()
            .items
        )

    def find_successors(self, tenant_id: str, operation_ids: list[str]) -> list[Operation]:
        """Operations whose predecessor is one of ``operation_ids``."""
        if not operation_ids:
            return []
        return (
            self._dao.query.filter(
                tenant_id=str(tenant_id),
                origin_type="operation",
                origin_id__in=[str(i) for i in operation_ids],
            )
            .order_by("created_at")
            .limit(None)
            .all()
            .items
        )
