"""Tests for Operation state transitions: assign, start, update and cancel."""

import json

import pytest
from protean.exceptions import ValidationError
from warehouse.operation.events import (
    OperationAssigned,
    OperationCancelled,
    OperationDetailsUpdated,
    OperationStarted,
)
from warehouse.operation.operation import (
    DEFAULT_CANCEL_REASON,
    ItemStatus,
    Operation,
    OperationStatus,
)


def _make_operation(**overrides):
    defaults = {
        "tenant_id": "tenant-1",
        "branch_id": "branch-1",
        "folio": "PICK-000001",
        "operation_type": "picking",
        "items_data": [
            {"product_id": "prod-1", "demanded_quantity": 10},
            {"product_id": "prod-2", "demanded_quantity": 5},
            {"product_id": "prod-3", "demanded_quantity": 2},
        ],
    }
    defaults.update(overrides)
    op = Operation.create(**defaults)
    op._events.clear()
    return op


def _completed_operation():
    op = _make_operation(items_data=[{"product_id": "prod-1", "demanded_quantity": 1}])
    op.process_item(str(op.items[0].id), 1)
    op._events.clear()
    return op


def _cancelled_operation():
    op = _make_operation()
    op.cancel("Customer withdrew")
    op._events.clear()
    return op


class TestAssign:
    def test_draft_becomes_assigned(self):
        op = _make_operation()
        op.assign("picker-1")
        assert op.status == OperationStatus.ASSIGNED.value
        assert str(op.assigned_to) == "picker-1"

    def test_reassign_keeps_status(self):
        op = _make_operation()
        op.assign("picker-1")
        op.start("picker-1")
        op.assign("picker-2")
        assert op.status == OperationStatus.IN_PROGRESS.value
        assert str(op.assigned_to) == "picker-2"

    def test_raises_assigned_event(self):
        op = _make_operation()
        op.assign("picker-1")
        assert isinstance(op._events[-1], OperationAssigned)
        assert op._events[-1].status == OperationStatus.ASSIGNED.value

    def test_assignee_required(self):
        op = _make_operation()
        with pytest.raises(ValidationError):
            op.assign("")

    @pytest.mark.parametrize("factory", [_completed_operation, _cancelled_operation])
    def test_terminal_operation_cannot_be_assigned(self, factory):
        op = factory()
        with pytest.raises(ValidationError):
            op.assign("picker-1")


class TestStart:
    def test_draft_starts_in_progress(self):
        op = _make_operation()
        op.start("picker-1")
        assert op.status == OperationStatus.IN_PROGRESS.value
        assert op.started_at is not None

    def test_start_defaults_assignee(self):
        op = _make_operation()
        op.start("picker-1")
        assert str(op.assigned_to) == "picker-1"

    def test_start_keeps_existing_assignee(self):
        op = _make_operation()
        op.assign("picker-1")
        op.start("supervisor-1")
        assert str(op.assigned_to) == "picker-1"

    def test_repeated_start_keeps_first_timestamp(self):
        op = _make_operation()
        op.start("picker-1")
        first = op.started_at
        op.start("picker-1")
        assert op.started_at == first

    def test_start_on_partial_keeps_partial(self):
        op = _make_operation()
        op.process_item(str(op.items[0].id), 3)
        assert op.status == OperationStatus.PARTIAL.value
        op.start("picker-1")
        assert op.status == OperationStatus.PARTIAL.value

    def test_raises_started_event(self):
        op = _make_operation()
        op.start("picker-1")
        assert isinstance(op._events[-1], OperationStarted)

    @pytest.mark.parametrize("factory", [_completed_operation, _cancelled_operation])
    def test_terminal_operation_cannot_start(self, factory):
        op = factory()
        with pytest.raises(ValidationError):
            op.start("picker-1")


class TestUpdateDetails:
    def test_updates_editable_fields(self):
        op = _make_operation()
        op.update_details({"name": "Rush order", "priority": 1}, updated_by="lead-1")
        assert op.name == "Rush order"
        assert op.priority == 1
        assert str(op.updated_by) == "lead-1"

    def test_raises_details_updated_event(self):
        op = _make_operation()
        op.update_details({"priority": 2})
        event = op._events[-1]
        assert isinstance(event, OperationDetailsUpdated)
        assert json.loads(event.changes) == {"priority": 2}

    def test_empty_changes_rejected(self):
        op = _make_operation()
        with pytest.raises(ValidationError):
            op.update_details({})

    def test_unknown_field_rejected(self):
        op = _make_operation()
        with pytest.raises(ValidationError) as exc:
            op.update_details({"status": "completed"})
        assert "fields" in exc.value.messages

    def test_priority_must_be_positive(self):
        op = _make_operation()
        with pytest.raises(ValidationError):
            op.update_details({"priority": 0})

    def test_terminal_operation_accepts_notes(self):
        op = _completed_operation()
        op.update_details({"notes": "Checked by supervisor"})
        assert op.notes == "Checked by supervisor"

    def test_terminal_operation_rejects_other_fields(self):
        op = _cancelled_operation()
        with pytest.raises(ValidationError):
            op.update_details({"priority": 1})


class TestCancel:
    def test_cancel_marks_operation_cancelled(self):
        op = _make_operation()
        assert op.cancel("Out of stock", cancelled_by="lead-1") is True
        assert op.status == OperationStatus.CANCELLED.value
        assert op.cancelled_at is not None

    def test_cancel_only_cancels_open_items(self):
        op = _make_operation()
        first, second, third = (str(i.id) for i in op.items)
        op.process_item(first, 10)
        op.process_item(second, 2)

        op.cancel("Out of stock")

        statuses = {str(i.id): i.status for i in op.items}
        assert statuses[first] == ItemStatus.COMPLETED.value
        assert statuses[second] == ItemStatus.CANCELLED.value
        assert statuses[third] == ItemStatus.CANCELLED.value

    def test_cancel_keeps_processed_quantities(self):
        op = _make_operation()
        item_id = str(op.items[1].id)
        op.process_item(item_id, 2)
        op.cancel()
        assert op.find_item(item_id).processed_quantity == 2

    def test_cancel_appends_reason_to_internal_notes(self):
        op = _make_operation()
        op.cancel("Damaged pallet")
        assert "Cancelled: Damaged pallet" in op.internal_notes

    def test_cancel_defaults_reason(self):
        op = _make_operation()
        op.cancel("  ")
        assert op._events[-1].reason == DEFAULT_CANCEL_REASON

    def test_cancel_raises_event_with_cancelled_items(self):
        op = _make_operation()
        op.process_item(str(op.items[0].id), 10)
        op.cancel("Stop")
        event = op._events[-1]
        assert isinstance(event, OperationCancelled)
        assert set(json.loads(event.cancelled_item_ids)) == {str(op.items[1].id), str(op.items[2].id)}

    def test_cancel_is_idempotent(self):
        op = _cancelled_operation()
        assert op.cancel("Again") is False
        assert op.status == OperationStatus.CANCELLED.value
        assert op._events == []

    def test_completed_operation_cannot_be_cancelled(self):
        op = _completed_operation()
        with pytest.raises(ValidationError):
            op.cancel("Too late")
