"""Application tests for order creation, editor decisions and the QC gate."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from studio.deliverable.deliverable import Deliverable
from studio.errors import Conflict, Forbidden, InvalidStateTransition
from studio.job.job import Job, JobStatus
from studio.job.management import CancelJob
from studio.order.acceptance import AcceptOrder, CancelOrder, DeclineOrder
from studio.order.creation import CreateOrder
from studio.order.order import Order, OrderStatus
from studio.order.quality_check import QCAccept
from studio.order.services import EditOrderService


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestCreateOrder:
    def test_order_numbers_are_five_digit_and_distinct(self, ops):
        first = _order(ops.create_order())
        second = _order(ops.create_order())
        assert len(first.order_number) == 5
        assert first.order_number.isdigit()
        assert first.order_number != second.order_number

    def test_customer_defaults_to_the_jobs_customer(self, ops, customer_id):
        assert _order(ops.create_order()).customer_id == customer_id

    def test_services_are_stored(self, ops):
        order = _order(ops.create_order(services=[{"service_id": "svc-twilight", "quantity": 3}]))
        assert order.services[0].quantity == 3

    def test_other_tenant_cannot_order_against_the_job(self, job_id, other_tenant_id):
        with pytest.raises(Forbidden):
            current_domain.process(
                CreateOrder(
                    job_id=job_id,
                    services=json.dumps([]),
                    actor_id="partner-x",
                    actor_role="partner",
                    tenant_id=other_tenant_id,
                ),
                asynchronous=False,
            )

    def test_cancelled_job_takes_no_orders(self, ops, job_id, partner):
        current_domain.process(CancelJob(job_id=job_id, reason="Listing withdrawn", **partner), asynchronous=False)
        with pytest.raises(Conflict):
            ops.create_order()


class TestEditorDecisions:
    def test_accept_starts_the_job(self, ops, editor_id, job_id):
        order_id = ops.create_order()
        ops.assign(order_id, target_status=None)
        current_domain.process(AcceptOrder(order_id=order_id, editor_id=editor_id), asynchronous=False)

        assert _order(order_id).status == OrderStatus.PROCESSING.value
        assert current_domain.repository_for(Job).get(job_id).status == JobStatus.IN_PROGRESS.value

    def test_decline_cancels_the_order(self, ops, editor_id):
        order_id = ops.create_order()
        ops.assign(order_id, target_status=None)
        current_domain.process(
            DeclineOrder(order_id=order_id, editor_id=editor_id, reason="On leave"),
            asynchronous=False,
        )
        order = _order(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.assigned_editor_id is None

    def test_other_editor_cannot_accept(self, ops):
        order_id = ops.create_order()
        ops.assign(order_id, target_status=None)
        with pytest.raises(Forbidden):
            current_domain.process(AcceptOrder(order_id=order_id, editor_id="editor-002"), asynchronous=False)

    def test_staff_cancel_of_pending_order(self, ops, partner):
        order_id = ops.create_order()
        current_domain.process(CancelOrder(order_id=order_id, reason="Duplicate", **partner), asynchronous=False)
        assert _order(order_id).status == OrderStatus.CANCELLED.value

    def test_cannot_cancel_work_in_progress(self, ops, partner):
        order_id = ops.create_order()
        ops.assign(order_id)
        with pytest.raises(InvalidStateTransition):
            current_domain.process(CancelOrder(order_id=order_id, **partner), asynchronous=False)


class TestSubmission:
    def test_submit_requires_a_completed_file(self, ops):
        order_id = ops.create_order()
        ops.assign(order_id)
        with pytest.raises(ValidationError):
            ops.submit(order_id)
        assert _order(order_id).status == OrderStatus.PROCESSING.value

    def test_submit_moves_to_human_check(self, ops):
        order_id = ops.to_human_check()
        assert _order(order_id).status == OrderStatus.HUMAN_CHECK.value


class TestQualityGate:
    def test_accept_completes_order_and_approves_its_files(self, ops):
        order_id = ops.to_completed()

        order = _order(order_id)
        assert order.status == OrderStatus.COMPLETED.value
        assert order.used_revision_rounds == 0
        files = current_domain.repository_for(Deliverable).completed_for_order(order_id)
        assert files
        assert all(f.qc_approved_at is not None for f in files)

    def test_every_rejection_consumes_one_round(self, ops):
        order_id = ops.to_human_check()
        ops.qc_reject(order_id, "Windows too dark")
        assert _order(order_id).used_revision_rounds == 1

        ops.submit(order_id)
        ops.qc_reject(order_id, "Still too dark")
        order = _order(order_id)
        assert order.used_revision_rounds == 2
        assert order.status == OrderStatus.IN_REVISION.value

        ops.submit(order_id)
        ops.qc_accept(order_id)
        assert _order(order_id).used_revision_rounds == 2

    def test_job_completes_when_last_active_order_passes(self, ops, job_id):
        first = ops.to_human_check()
        second = ops.to_human_check()

        ops.qc_accept(first)
        assert current_domain.repository_for(Job).get(job_id).status == JobStatus.IN_PROGRESS.value

        ops.qc_accept(second)
        assert current_domain.repository_for(Job).get(job_id).status == JobStatus.COMPLETED.value

    def test_assigned_editor_may_run_qc(self, ops, editor_id):
        order_id = ops.to_human_check()
        current_domain.process(
            QCAccept(order_id=order_id, approver_id=editor_id, approver_role="editor"),
            asynchronous=False,
        )
        assert _order(order_id).status == OrderStatus.COMPLETED.value

    def test_unrelated_editor_cannot_run_qc(self, ops):
        order_id = ops.to_human_check()
        with pytest.raises(Forbidden):
            current_domain.process(
                QCAccept(order_id=order_id, approver_id="editor-002", approver_role="editor"),
                asynchronous=False,
            )

    def test_qc_outside_human_check_is_rejected(self, ops):
        order_id = ops.create_order()
        ops.assign(order_id)
        with pytest.raises(InvalidStateTransition):
            ops.qc_accept(order_id)


class TestServiceEdits:
    def test_quantity_edit_while_processing(self, ops, partner):
        order_id = ops.create_order()
        ops.assign(order_id)
        line_id = str(_order(order_id).services[0].id)
        current_domain.process(
            EditOrderService(order_id=order_id, line_id=line_id, quantity=25, **partner),
            asynchronous=False,
        )
        assert _order(order_id).services[0].quantity == 25

    def test_edit_refused_once_in_review(self, ops, partner):
        order_id = ops.to_human_check()
        line_id = str(_order(order_id).services[0].id)
        with pytest.raises(Conflict):
            current_domain.process(
                EditOrderService(order_id=order_id, line_id=line_id, quantity=2, **partner),
                asynchronous=False,
            )
