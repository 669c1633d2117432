"""Tenant-scoped transactions.

Every mutating action runs inside ``tenant_transaction``. The tenant id is
checked, bound to the structlog context for the duration of the block, and a
Protean ``UnitOfWork`` wraps the work so it commits or rolls back as a whole.
Command handlers already run inside a UnitOfWork; a nested one joins it.
"""

from contextlib import contextmanager

import structlog
from protean import UnitOfWork
from protean.exceptions import TransactionError, ValidationError

logger = structlog.get_logger(__name__)


def require_tenant(tenant_id: str | None) -> str:
    """Return the tenant id as a string, rejecting blank values."""
    if tenant_id is None or not str(tenant_id).strip():
        raise ValidationError({"tenant_id": ["Tenant is required"]})
    return str(tenant_id)


@contextmanager
def tenant_transaction(tenant_id: str):
    """Run a block inside one Unit of Work scoped to ``tenant_id``."""
    tenant_id = require_tenant(tenant_id)

    with structlog.contextvars.bound_contextvars(tenant_id=tenant_id):
        try:
            with UnitOfWork() as uow:
                yield uow
        except TransactionError as exc:
            logger.error("Tenant transaction rolled back", error=str(exc))
            raise


def with_tenant_transaction(tenant_id: str, fn):
    """Call ``fn(uow)`` inside a tenant transaction and return its result."""
    with tenant_transaction(tenant_id) as uow:
        return fn(uow)
