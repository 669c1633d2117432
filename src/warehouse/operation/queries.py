"""Operation lookups for the API — tenant-scoped and read-only."""

from protean.utils.globals import current_domain

from warehouse.operation.chain import ChainStep, resolve_chain
from warehouse.operation.operation import Operation
from warehouse.operation.repository import OperationFilter
from warehouse.tenancy import require_tenant


def list_operations(tenant_id: str, filters: OperationFilter | None = None) -> list[Operation]:
    return current_domain.repository_for(Operation).list_for_tenant(require_tenant(tenant_id), filters)


def get_operation(tenant_id: str, operation_id: str) -> Operation:
    return current_domain.repository_for(Operation).get_for_tenant(require_tenant(tenant_id), operation_id)


def get_chain(tenant_id: str, operation_id: str) -> list[ChainStep]:
    return resolve_chain(require_tenant(tenant_id), operation_id)
