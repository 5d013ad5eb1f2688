"""BDD tests for delivering jobs to customers."""

from protean import current_domain
from pytest_bdd import given, scenarios, when

from studio.errors import WorkflowError
from studio.job.management import CancelJob

scenarios("features/job_delivery.feature")


@given("the job has been cancelled")
def job_cancelled(partner, job_id):
    current_domain.process(CancelJob(job_id=job_id, reason="Vendor withdrew", **partner), asynchronous=False)


@when("the partner delivers the job")
def deliver_job(ops, error):
    try:
        ops.deliver_job()
    except WorkflowError as exc:
        error["exc"] = exc
