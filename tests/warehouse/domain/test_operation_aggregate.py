"""Tests for Operation aggregate creation and structure."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from warehouse.operation.events import OperationCreated
from warehouse.operation.operation import (
    DEFAULT_PRIORITY,
    ItemStatus,
    Operation,
    OperationStatus,
    OriginType,
    item_status_for,
)


def _make_items():
    return [
        {"product_id": "prod-1", "sku": "SKU-001", "demanded_quantity": 10},
        {"product_id": "prod-2", "sku": "SKU-002", "demanded_quantity": 5},
    ]


def _make_operation(**overrides):
    defaults = {
        "tenant_id": "tenant-1",
        "branch_id": "branch-1",
        "folio": "REC-000001",
        "operation_type": "receiving",
        "items_data": _make_items(),
        "created_by": "user-1",
    }
    defaults.update(overrides)
    return Operation.create(**defaults)


class TestOperationCreation:
    def test_create_starts_in_draft(self):
        op = _make_operation()
        assert op.status == OperationStatus.DRAFT.value

    def test_create_sets_tenant_and_branch(self):
        op = _make_operation()
        assert str(op.tenant_id) == "tenant-1"
        assert str(op.branch_id) == "branch-1"

    def test_create_defaults_name_from_type_and_folio(self):
        op = _make_operation()
        assert op.name == "receiving REC-000001"

    def test_create_keeps_explicit_name(self):
        op = _make_operation(name="Inbound dock 3")
        assert op.name == "Inbound dock 3"

    def test_create_defaults_priority(self):
        op = _make_operation()
        assert op.priority == DEFAULT_PRIORITY

    def test_create_defaults_origin_to_manual(self):
        op = _make_operation()
        assert op.origin_type == OriginType.MANUAL.value

    def test_create_adds_pending_items_with_zero_processed(self):
        op = _make_operation()
        assert len(op.items) == 2
        for item in op.items:
            assert item.status == ItemStatus.PENDING.value
            assert item.processed_quantity == 0

    def test_create_ignores_processed_quantity_in_input(self):
        items = [{"product_id": "prod-1", "demanded_quantity": 4, "processed_quantity": 3}]
        op = _make_operation(items_data=items)
        assert op.items[0].processed_quantity == 0

    def test_items_inherit_operation_locations(self):
        op = _make_operation(source_location_id="loc-src", destination_location_id="loc-dst")
        assert str(op.items[0].source_location_id) == "loc-src"
        assert str(op.items[0].destination_location_id) == "loc-dst"

    def test_item_location_overrides_operation_location(self):
        items = [{"product_id": "prod-1", "demanded_quantity": 1, "destination_location_id": "loc-bin"}]
        op = _make_operation(items_data=items, destination_location_id="loc-dst")
        assert str(op.items[0].destination_location_id) == "loc-bin"

    def test_totals(self):
        op = _make_operation()
        assert op.total_demanded == 15
        assert op.total_processed == 0

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _make_operation(operation_type="teleport")
        assert "operation_type" in exc.value.messages

    def test_operation_origin_requires_predecessor(self):
        with pytest.raises(ValidationError) as exc:
            _make_operation(origin_type=OriginType.OPERATION.value)
        assert "origin_id" in exc.value.messages

    def test_item_demand_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_operation(items_data=[{"product_id": "prod-1", "demanded_quantity": 0}])

    def test_item_requires_product(self):
        with pytest.raises(ValidationError):
            _make_operation(items_data=[{"demanded_quantity": 2}])


class TestOperationCreatedEvent:
    def test_raises_operation_created(self):
        op = _make_operation()
        assert len(op._events) == 1
        assert isinstance(op._events[0], OperationCreated)

    def test_event_carries_identity_and_totals(self):
        op = _make_operation()
        event = op._events[0]
        assert event.operation_id == str(op.id)
        assert event.tenant_id == "tenant-1"
        assert event.folio == "REC-000001"
        assert event.item_count == 2
        assert event.total_demanded == 15

    def test_event_status_is_draft(self):
        op = _make_operation()
        assert op._events[0].status == OperationStatus.DRAFT.value


class TestFindItem:
    def test_finds_existing_item(self):
        op = _make_operation()
        item = op.items[0]
        assert op.find_item(str(item.id)).id == item.id

    def test_unknown_item_raises_not_found(self):
        op = _make_operation()
        with pytest.raises(ObjectNotFoundError):
            op.find_item("missing")


class TestItemStatusFor:
    def test_nothing_processed_is_pending(self):
        assert item_status_for(0, 10) == ItemStatus.PENDING

    def test_some_processed_is_in_progress(self):
        assert item_status_for(3, 10) == ItemStatus.IN_PROGRESS

    def test_all_processed_is_completed(self):
        assert item_status_for(10, 10) == ItemStatus.COMPLETED
