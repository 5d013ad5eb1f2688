"""Tests for the Job state machine."""

import pytest

from studio.errors import InvalidStateTransition
from studio.job.events import JobDelivered
from studio.job.job import Job, JobStatus


def _make_job():
    return Job.create(tenant_id="tenant-001", address="4 Mill Lane, Lewes", customer_id="cust-001")


class TestJobCreation:
    def test_new_job_is_booked(self):
        job = _make_job()
        assert job.status == JobStatus.BOOKED.value
        assert len(job.reference) == 8
        assert job.reference == job.reference.upper()

    def test_references_are_unique(self):
        assert _make_job().reference != _make_job().reference


class TestStartWork:
    def test_booked_job_starts(self):
        job = _make_job()
        job.start_work()
        assert job.status == JobStatus.IN_PROGRESS.value

    def test_completed_job_reopens(self):
        job = _make_job()
        job.start_work()
        job.mark_completed()
        job.start_work()
        assert job.status == JobStatus.IN_PROGRESS.value

    def test_start_is_a_no_op_once_delivered(self):
        job = _make_job()
        job.deliver()
        job.start_work()
        assert job.status == JobStatus.DELIVERED.value

    def test_cannot_complete_a_booked_job(self):
        job = _make_job()
        with pytest.raises(InvalidStateTransition):
            job.mark_completed()


class TestDelivery:
    def test_deliver_stamps_delivered_at(self):
        job = _make_job()
        job.deliver()
        assert job.is_delivered
        assert job.delivered_at is not None

    def test_redelivery_keeps_first_timestamp(self):
        job = _make_job()
        job.deliver()
        first = job.delivered_at
        job.deliver()
        assert job.delivered_at == first
        events = [e for e in job._events if isinstance(e, JobDelivered)]
        assert [e.redelivery for e in events] == [False, True]

    def test_cancelled_job_cannot_be_delivered(self):
        job = _make_job()
        job.cancel("Vendor pulled out")
        with pytest.raises(InvalidStateTransition):
            job.deliver()

    def test_delivered_job_cannot_be_cancelled(self):
        job = _make_job()
        job.deliver()
        with pytest.raises(InvalidStateTransition):
            job.cancel()


class TestDeliveryToken:
    def test_token_is_generated_once(self):
        job = _make_job()
        token = job.issue_delivery_token()
        assert token
        assert job.issue_delivery_token() == token

    def test_cover_image_can_be_cleared(self):
        job = _make_job()
        job.update_cover_image("completed/job/folders/abc/front.jpg")
        job.update_cover_image(None)
        assert job.cover_image is None
