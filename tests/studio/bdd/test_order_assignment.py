"""BDD tests for assigning orders to editors."""

from protean import current_domain
from pytest_bdd import given, parsers, scenarios, when

from studio.errors import WorkflowError
from studio.order.assignment import AssignOrder

scenarios("features/order_assignment.feature")


def _assign(partner, order_id, editor_id):
    current_domain.process(
        AssignOrder(order_id=order_id, editor_id=editor_id, target_status="processing", **partner),
        asynchronous=False,
    )


@given("the order has been assigned")
def order_already_assigned(partner, order_id, editor_id):
    _assign(partner, order_id, editor_id)


@when("the partner assigns the order to the editor")
def assign_to_editor(partner, order_id, editor_id, error):
    try:
        _assign(partner, order_id, editor_id)
    except WorkflowError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the partner assigns the order to "{other_editor}"'))
def assign_to_other(partner, order_id, other_editor, error):
    try:
        _assign(partner, order_id, other_editor)
    except WorkflowError as exc:
        error["exc"] = exc
