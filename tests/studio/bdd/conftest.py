"""Shared BDD fixtures and step definitions for the studio workflow."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from studio.customer.management import SetRevisionLimitOverride
from studio.errors import Conflict, Forbidden, InvalidStateTransition, RevisionLimitReached, StaleWrite
from studio.job.job import Job
from studio.notification import get_notification_sink
from studio.order.order import Order
from studio.tenant.configuration import UpdateRevisionSettings

# Map error names used in feature files to exception classes
_ERROR_CLASSES = {
    "Forbidden": Forbidden,
    "RevisionLimitReached": RevisionLimitReached,
    "Conflict": Conflict,
    "StaleWrite": StaleWrite,
    "InvalidStateTransition": InvalidStateTransition,
    "ValidationError": ValidationError,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured workflow errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a booked job with an active editor")
def booked_job(ops):
    return ops


@given("a pending order", target_fixture="order_id")
def pending_order(ops):
    return ops.create_order()


@given("an order awaiting quality check", target_fixture="order_id")
def order_awaiting_qc(ops):
    return ops.to_human_check()


@given("a completed order", target_fixture="order_id")
def completed_order(ops):
    return ops.to_completed()


@given("the job has been delivered")
def job_delivered(ops):
    ops.deliver_job()


@given(parsers.cfparse("the tenant limits customers to {limit:d} revision rounds"))
def tenant_limits_revisions(partner, limit):
    current_domain.process(
        UpdateRevisionSettings(
            tenant_id=partner["tenant_id"],
            enable_client_revision_limit=True,
            client_revision_round_limit=limit,
            actor_id=partner["actor_id"],
            actor_role=partner["actor_role"],
        ),
        asynchronous=False,
    )


@given(parsers.cfparse('the customer has a revision override of "{override}"'))
def customer_override(partner, customer_id, override):
    current_domain.process(
        SetRevisionLimitOverride(
            customer_id=customer_id,
            revision_limit_override=override,
            **partner,
        ),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then(parsers.cfparse('the job status is "{status}"'))
def job_status_is(job_id, status):
    assert current_domain.repository_for(Job).get(job_id).status == status


@then(parsers.cfparse("the order has used {rounds:d} revision rounds"))
def order_used_rounds(order_id, rounds):
    assert current_domain.repository_for(Order).get(order_id).used_revision_rounds == rounds


@then(parsers.cfparse("the request is refused with {error_name}"))
def request_refused(error, error_name):
    assert error["exc"] is not None, "Expected the request to be refused"
    assert isinstance(error["exc"], _ERROR_CLASSES[error_name])


@then("the request succeeds")
def request_succeeds(error):
    assert error["exc"] is None, f"Unexpected error: {error['exc']}"


@then(parsers.cfparse('the editor is notified with "{notification_type}"'))
def editor_notified(editor_id, notification_type):
    assert get_notification_sink().sent_to(editor_id, notification_type)


@then(parsers.cfparse('the customer is notified with "{notification_type}"'))
def customer_notified(customer_id, notification_type):
    assert get_notification_sink().sent_to(customer_id, notification_type)
