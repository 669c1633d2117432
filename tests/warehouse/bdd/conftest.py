"""Shared BDD fixtures and step definitions for the Warehouse domain."""

import re

import pytest
from protean.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then, when
from warehouse.operation.operation import Operation

_ERROR_KINDS = {
    "validation": ValidationError,
    "conflict": InvalidStateError,
    "not found": ObjectNotFoundError,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the exception raised by the last action."""
    return {"exc": None}


def _item(operation, number):
    return operation.items[number - 1]


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a {operation_type} operation demanding {quantities} units"),
    target_fixture="operation",
)
def operation_demanding(operation_type, quantities):
    demands = [int(q) for q in re.findall(r"\d+", quantities)]
    operation = Operation.create(
        tenant_id="tenant-bdd",
        branch_id="branch-bdd",
        folio=f"{operation_type[:4].upper()}-000001",
        operation_type=operation_type,
        items_data=[
            {"product_id": f"prod-{n}", "sku": f"SKU-{n:03d}", "demanded_quantity": d}
            for n, d in enumerate(demands, 1)
        ],
    )
    operation._events.clear()
    return operation


# ---------------------------------------------------------------------------
# Steps shared by Given and When
# ---------------------------------------------------------------------------
@given(parsers.cfparse("item {number:d} is processed with {quantity:d} units"))
@when(parsers.cfparse("item {number:d} is processed with {quantity:d} units"))
def process_item(operation, number, quantity, error):
    try:
        operation.process_item(str(_item(operation, number).id), quantity, processed_by="worker-bdd")
    except (ValidationError, ObjectNotFoundError) as exc:
        error["exc"] = exc


@given(parsers.cfparse('the operation is cancelled with reason "{reason}"'))
@when(parsers.cfparse('the operation is cancelled with reason "{reason}"'))
def cancel_operation(operation, reason, error):
    try:
        operation.cancel(reason, cancelled_by="lead-bdd")
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the operation status is "{status}"'))
def operation_status_is(operation, status):
    assert operation.status == status


@then(parsers.cfparse('item {number:d} is "{status}"'))
def item_status_is(operation, number, status):
    assert _item(operation, number).status == status


@then(parsers.cfparse("item {number:d} has {quantity:d} units processed"))
def item_processed_quantity(operation, number, quantity):
    assert _item(operation, number).processed_quantity == quantity


@then(parsers.cfparse("the action fails with a {kind} error"))
def action_fails(error, kind):
    assert isinstance(error["exc"], _ERROR_KINDS[kind])
