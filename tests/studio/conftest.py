"""Shared fixtures for the studio domain tests.

Most workflow tests need the same cast: a tenant partner, an editor with an
active partnership, a registered customer and a booked job. The ``ops``
fixture walks orders through their lifecycle so tests can start from any
status.
"""

import base64
import json

import pytest
from protean import current_domain

from studio.calendar_sync import reset_calendar
from studio.customer.management import RegisterCustomer
from studio.deliverable.upload import UploadDeliverable
from studio.job.creation import CreateJob
from studio.job.delivery import DeliverJob
from studio.mailer import reset_email_sender
from studio.notification import reset_notification_sink
from studio.order.assignment import AssignOrder
from studio.order.creation import CreateOrder
from studio.order.quality_check import QCAccept, QCReject
from studio.order.submission import SubmitForReview
from studio.storage import reset_storage
from studio.tenant.invitation import AcceptPartnership, InviteEditor
from studio.tenant.partnership import EditorPartnership

TENANT_ID = "tenant-001"
OTHER_TENANT_ID = "tenant-999"
PARTNER_ID = "partner-001"
EDITOR_ID = "editor-001"


@pytest.fixture(scope="session")
def _studio_domain(request):
    """Initialize the studio domain once per session."""
    from studio.domain import studio

    studio.init()
    return studio


@pytest.fixture(scope="session", autouse=True)
def setup_db(_studio_domain):
    from studio.utils.db import drop_db, setup_db

    setup_db(_studio_domain)

    yield

    drop_db(_studio_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_studio_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _studio_domain.domain_context()
    ctx.push()

    yield

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

    reset_storage()
    reset_notification_sink()
    reset_calendar()
    reset_email_sender()

    ctx.pop()


def _process(command):
    return current_domain.process(command, asynchronous=False)


def partner_actor(tenant_id: str = TENANT_ID) -> dict:
    return {"actor_id": PARTNER_ID, "actor_role": "partner", "tenant_id": tenant_id}


@pytest.fixture()
def partner():
    return partner_actor()


def activate_editor(editor_id: str, tenant_id: str = TENANT_ID) -> str:
    partnership_id = _process(
        InviteEditor(
            tenant_id=tenant_id,
            editor_email=f"{editor_id}@editors.example.com",
            actor_id=PARTNER_ID,
            actor_role="partner",
        )
    )
    token = current_domain.repository_for(EditorPartnership).get(partnership_id).invite_token
    _process(AcceptPartnership(partnership_id=partnership_id, editor_id=editor_id, invite_token=token))
    return partnership_id


@pytest.fixture()
def editor_id():
    activate_editor(EDITOR_ID)
    return EDITOR_ID


@pytest.fixture()
def customer_id():
    return _process(
        RegisterCustomer(tenant_id=TENANT_ID, name="Dana Whitfield", email="dana@example.com")
    )


@pytest.fixture()
def job_id(customer_id):
    return _process(
        CreateJob(
            tenant_id=TENANT_ID,
            address="12 Harbour Road, Brighton",
            customer_id=customer_id,
            actor_id=PARTNER_ID,
            actor_role="partner",
        )
    )


class WorkflowOps:
    """Drive orders through the workflow with the default cast."""

    def __init__(self, job_id: str, editor_id: str):
        self.job_id = job_id
        self.editor_id = editor_id

    def create_order(self, job_id: str | None = None, services: list[dict] | None = None) -> str:
        services = services if services is not None else [{"service_id": "svc-hdr", "quantity": 10}]
        return _process(
            CreateOrder(job_id=job_id or self.job_id, services=json.dumps(services), **partner_actor())
        )

    def assign(self, order_id: str, target_status: str | None = "processing") -> None:
        _process(
            AssignOrder(
                order_id=order_id,
                editor_id=self.editor_id,
                target_status=target_status,
                **partner_actor(),
            )
        )

    def upload_completed(self, order_id: str, file_name: str = "kitchen.jpg", data: bytes = b"edited") -> str:
        return _process(
            UploadDeliverable(
                job_id=self.job_id,
                file_name=file_name,
                content=base64.b64encode(data).decode(),
                mime_type="image/jpeg",
                status="completed",
                order_id=order_id,
                actor_id=self.editor_id,
                actor_role="editor",
            )
        )

    def submit(self, order_id: str) -> None:
        _process(SubmitForReview(order_id=order_id, editor_id=self.editor_id))

    def qc_accept(self, order_id: str) -> None:
        _process(QCAccept(order_id=order_id, approver_id=PARTNER_ID, approver_role="partner", tenant_id=TENANT_ID))

    def qc_reject(self, order_id: str, notes: str = "Sky is blown out") -> None:
        _process(
            QCReject(
                order_id=order_id,
                approver_id=PARTNER_ID,
                approver_role="partner",
                notes=notes,
                tenant_id=TENANT_ID,
            )
        )

    def to_human_check(self, order_id: str | None = None) -> str:
        order_id = order_id or self.create_order()
        self.assign(order_id)
        self.upload_completed(order_id)
        self.submit(order_id)
        return order_id

    def to_completed(self, order_id: str | None = None) -> str:
        order_id = self.to_human_check(order_id)
        self.qc_accept(order_id)
        return order_id

    def deliver_job(self) -> str:
        return _process(DeliverJob(job_id=self.job_id, **partner_actor()))


@pytest.fixture()
def ops(job_id, editor_id):
    return WorkflowOps(job_id, editor_id)


@pytest.fixture()
def tenant_id():
    return TENANT_ID


@pytest.fixture()
def other_tenant_id():
    return OTHER_TENANT_ID


@pytest.fixture()
def partner_id():
    return PARTNER_ID


@pytest.fixture()
def partner_editor():
    """Activate a partnership for any editor id."""
    return activate_editor
