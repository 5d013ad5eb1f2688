"""Side effects are best-effort: their failures never revert a transition."""

import pytest
from protean import current_domain

from studio.activity.activity import Activity
from studio.calendar_sync import get_calendar
from studio.job.job import Job, JobStatus
from studio.mailer import get_email_sender
from studio.notification import get_notification_sink, set_notification_sink
from studio.notification.port import NotificationSink
from studio.order.order import Order, OrderStatus


class ExplodingSink(NotificationSink):
    def publish(self, recipient_id, notification_type, subject, body, context=None):
        raise RuntimeError("notification service crashed")


class TestSideEffectFailures:
    def test_crashing_notifier_does_not_revert_assignment(self, ops):
        set_notification_sink(ExplodingSink())
        order_id = ops.create_order()
        ops.assign(order_id)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PROCESSING.value
        assert order.assigned_editor_id == ops.editor_id

    def test_failed_notifications_do_not_block_qc(self, ops):
        get_notification_sink().configure(should_succeed=False)
        order_id = ops.to_completed()
        assert current_domain.repository_for(Order).get(order_id).status == OrderStatus.COMPLETED.value

    def test_email_outage_does_not_block_delivery(self, ops, job_id):
        get_email_sender().configure(should_succeed=False)
        ops.deliver_job()
        assert current_domain.repository_for(Job).get(job_id).status == JobStatus.DELIVERED.value
        assert get_email_sender().sent_emails == []

    def test_calendar_outage_does_not_block_job_cancellation(self, job_id, partner):
        from datetime import UTC, datetime

        from studio.appointment.scheduling import ScheduleAppointment
        from studio.job.management import CancelJob

        current_domain.process(
            ScheduleAppointment(job_id=job_id, start_time=datetime(2026, 12, 1, 10, 0, tzinfo=UTC), **partner),
            asynchronous=False,
        )
        get_calendar().configure(should_succeed=False)
        current_domain.process(CancelJob(job_id=job_id, **partner), asynchronous=False)
        assert current_domain.repository_for(Job).get(job_id).status == JobStatus.CANCELLED.value


class TestNotificationsFollowCommit:
    def test_failed_transaction_sends_nothing(self, ops, monkeypatch):
        order_id = ops.create_order()

        def job_unavailable(job):
            raise RuntimeError("job store unavailable")

        monkeypatch.setattr(Job, "start_work", job_unavailable)
        with pytest.raises(RuntimeError):
            ops.assign(order_id)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.assigned_editor_id is None
        assert get_notification_sink().sent_to(ops.editor_id, "order_assigned") == []
        activities = current_domain.repository_for(Activity)._dao.query.filter(order_id=order_id).all().items
        assert "order_assigned" not in [a.action for a in activities]

    def test_committed_transition_notifies_once(self, ops):
        order_id = ops.create_order()
        ops.assign(order_id)

        assert len(get_notification_sink().sent_to(ops.editor_id, "order_assigned")) == 1
