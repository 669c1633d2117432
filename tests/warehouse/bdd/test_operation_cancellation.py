"""BDD tests for operation cancellation."""

from pytest_bdd import parsers, scenarios, then

scenarios("features/operation_cancellation.feature")


@then(parsers.cfparse('the internal notes mention "{text}"'))
def notes_mention(operation, text):
    assert text in (operation.internal_notes or "")


@then(parsers.cfparse('the internal notes do not mention "{text}"'))
def notes_do_not_mention(operation, text):
    assert text not in (operation.internal_notes or "")
