"""Integration tests for the operation board projection and its reports."""

import json
from datetime import UTC, datetime, timedelta

from protean import current_domain
from warehouse.operation.assignment import AssignOperation, StartOperation
from warehouse.operation.cancellation import CancelOperation
from warehouse.operation.creation import CreateOperation
from warehouse.operation.operation import Operation
from warehouse.operation.processing import ProcessItem
from warehouse.operation.updating import UpdateOperation
from warehouse.projections.operation_board import OperationBoardView
from warehouse.projections.reports import get_kanban_summary, get_statistics, list_pending


def _create(tenant_id="tenant-1", branch_id="branch-1", operation_type="receiving", **overrides):
    defaults = {
        "tenant_id": tenant_id,
        "branch_id": branch_id,
        "operation_type": operation_type,
        "items": json.dumps(
            [
                {"product_id": "prod-1", "demanded_quantity": 4},
                {"product_id": "prod-2", "demanded_quantity": 6},
            ]
        ),
    }
    defaults.update(overrides)
    return current_domain.process(CreateOperation(**defaults), asynchronous=False)


def _row(operation_id):
    return current_domain.repository_for(OperationBoardView).get(operation_id)


def _process_all(operation_id):
    op = current_domain.repository_for(Operation).get_for_tenant("tenant-1", operation_id)
    for item in op.items:
        current_domain.process(
            ProcessItem(
                tenant_id="tenant-1",
                operation_id=operation_id,
                item_id=str(item.id),
                quantity=item.demanded_quantity,
            ),
            asynchronous=False,
        )


class TestOperationBoardProjection:
    def test_created_operation_appears_on_board(self):
        operation_id = _create(name="Inbound 1", priority=2)
        row = _row(operation_id)
        assert row.folio == "REC-000001"
        assert row.name == "Inbound 1"
        assert row.status == "draft"
        assert row.priority == 2
        assert row.item_count == 2
        assert row.total_demanded == 10
        assert row.total_processed == 0

    def test_assignment_and_start_tracked(self):
        operation_id = _create()
        current_domain.process(
            AssignOperation(tenant_id="tenant-1", operation_id=operation_id, user_id="picker-1"),
            asynchronous=False,
        )
        assert _row(operation_id).status == "assigned"
        assert _row(operation_id).assigned_to == "picker-1"

        current_domain.process(StartOperation(tenant_id="tenant-1", operation_id=operation_id), asynchronous=False)
        assert _row(operation_id).status == "in_progress"

    def test_details_update_tracked(self):
        operation_id = _create()
        current_domain.process(
            UpdateOperation(
                tenant_id="tenant-1",
                operation_id=operation_id,
                changes=json.dumps({"name": "Renamed", "priority": 1}),
            ),
            asynchronous=False,
        )
        row = _row(operation_id)
        assert row.name == "Renamed"
        assert row.priority == 1

    def test_progress_tracked(self):
        operation_id = _create()
        op = current_domain.repository_for(Operation).get_for_tenant("tenant-1", operation_id)
        current_domain.process(
            ProcessItem(tenant_id="tenant-1", operation_id=operation_id, item_id=str(op.items[0].id), quantity=3),
            asynchronous=False,
        )
        row = _row(operation_id)
        assert row.status == "partial"
        assert row.total_processed == 3

    def test_completion_tracked(self):
        operation_id = _create()
        _process_all(operation_id)
        row = _row(operation_id)
        assert row.status == "completed"
        assert row.total_processed == 10

    def test_cancellation_tracked(self):
        operation_id = _create()
        current_domain.process(CancelOperation(tenant_id="tenant-1", operation_id=operation_id), asynchronous=False)
        assert _row(operation_id).status == "cancelled"


class TestListPending:
    def test_excludes_terminal_operations(self):
        open_id = _create()
        done_id = _create()
        cancelled_id = _create()
        _process_all(done_id)
        current_domain.process(CancelOperation(tenant_id="tenant-1", operation_id=cancelled_id), asynchronous=False)

        assert [row.operation_id for row in list_pending("tenant-1")] == [open_id]

    def test_orders_by_priority_then_schedule(self):
        soon = datetime.now(UTC) + timedelta(hours=1)
        later = datetime.now(UTC) + timedelta(days=1)
        unscheduled = _create(priority=2)
        late = _create(priority=2, scheduled_date=later)
        urgent = _create(priority=1)
        early = _create(priority=2, scheduled_date=soon)

        assert [row.operation_id for row in list_pending("tenant-1")] == [urgent, early, late, unscheduled]

    def test_filters_by_branch(self):
        _create(branch_id="branch-1")
        other = _create(branch_id="branch-2")
        assert [row.operation_id for row in list_pending("tenant-1", branch_id="branch-2")] == [other]

    def test_scoped_to_tenant(self):
        _create(tenant_id="tenant-1")
        assert list_pending("tenant-2") == []


class TestStatistics:
    def test_groups_by_type_and_status(self):
        _create()
        _create()
        done_id = _create()
        _process_all(done_id)
        _create(operation_type="picking")

        stats = get_statistics("tenant-1")
        assert stats == [
            {"operation_type": "picking", "status": "draft", "count": 1, "total_items": 2, "total_processed": 0},
            {"operation_type": "receiving", "status": "completed", "count": 1, "total_items": 2, "total_processed": 10},
            {"operation_type": "receiving", "status": "draft", "count": 2, "total_items": 4, "total_processed": 0},
        ]

    def test_empty_tenant(self):
        assert get_statistics("tenant-1") == []


class TestKanbanSummary:
    def test_counts_open_operations_per_status_and_type(self):
        _create()
        _create(operation_type="picking")
        assigned = _create(operation_type="picking")
        current_domain.process(
            AssignOperation(tenant_id="tenant-1", operation_id=assigned, user_id="u-1"),
            asynchronous=False,
        )

        summary = get_kanban_summary("tenant-1")
        assert summary["draft"] == {"receiving": 1, "picking": 1}
        assert summary["assigned"] == {"picking": 1}
        assert summary["in_progress"] == {}
        assert summary["partial"] == {}
        assert "completed" not in summary
