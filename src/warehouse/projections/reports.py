"""Operation board reports — pending list, statistics and kanban summary.

Reporting views over ``OperationBoardView``. They describe operations by
type and status only; item-level quantities are read from the Operation
aggregate, never from here.
"""

from protean.utils.globals import current_domain

from warehouse.operation.operation import PENDING_STATUSES, OperationStatus
from warehouse.projections.operation_board import OperationBoardView
from warehouse.tenancy import require_tenant

_PENDING = sorted(s.value for s in PENDING_STATUSES)


def _board_rows(tenant_id: str, branch_id: str | None, **criteria) -> list[OperationBoardView]:
    criteria["tenant_id"] = require_tenant(tenant_id)
    if branch_id:
        criteria["branch_id"] = str(branch_id)
    repo = current_domain.repository_for(OperationBoardView)
    return repo._dao.query.filter(**criteria).order_by(["priority", "scheduled_date", "created_at"]).limit(None).all().items


def list_pending(tenant_id: str, branch_id: str | None = None) -> list[OperationBoardView]:
    """Open operations by priority, then scheduled date (unscheduled last), then age."""
    return _board_rows(tenant_id, branch_id, status__in=_PENDING)


def get_statistics(tenant_id: str, branch_id: str | None = None) -> list[dict]:
    """Counts and unit totals per (operation type, status)."""
    groups: dict[tuple[str, str], dict] = {}
    for row in _board_rows(tenant_id, branch_id):
        key = (row.operation_type, row.status)
        group = groups.setdefault(
            key,
            {
                "operation_type": row.operation_type,
                "status": row.status,
                "count": 0,
                "total_items": 0,
                "total_processed": 0,
            },
        )
        group["count"] += 1
        group["total_items"] += row.item_count or 0
        group["total_processed"] += row.total_processed or 0
    return [groups[key] for key in sorted(groups)]


def get_kanban_summary(tenant_id: str, branch_id: str | None = None) -> dict[str, dict[str, int]]:
    """Non-terminal operations counted as ``{status: {operation_type: count}}``."""
    summary: dict[str, dict[str, int]] = {
        status.value: {} for status in OperationStatus if status in PENDING_STATUSES
    }
    for row in _board_rows(tenant_id, branch_id, status__in=_PENDING):
        by_type = summary.setdefault(row.status, {})
        by_type[row.operation_type] = by_type.get(row.operation_type, 0) + 1
    return summary
