"""BDD tests for item fulfillment and status derivation."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, when

scenarios("features/operation_fulfillment.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(
    parsers.cfparse(
        "the operation is completed with {first_qty:d} units of item {first:d} "
        "and {second_qty:d} units of item {second:d}"
    )
)
def complete_operation(operation, first_qty, first, second_qty, second, error):
    lines = [
        {"item_id": str(operation.items[first - 1].id), "quantity": first_qty},
        {"item_id": str(operation.items[second - 1].id), "quantity": second_qty},
    ]
    try:
        operation.complete(lines, completed_by="worker-bdd")
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse("item {number:d} is cancelled"))
def cancel_item(operation, number, error):
    try:
        operation.cancel_item(str(operation.items[number - 1].id))
    except ValidationError as exc:
        error["exc"] = exc
