"""FastAPI routes for the studio domain."""

import json

from fastapi import APIRouter, Depends
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from studio.access import Role
from studio.api.principal import Principal, current_principal
from studio.api.schemas import (
    AcceptPartnershipRequest,
    AddFileCommentRequest,
    AppointmentIdResponse,
    AssignOrderRequest,
    CommentIdResponse,
    CommentStatusRequest,
    CreateFolderRequest,
    CreateJobRequest,
    CreateOrderRequest,
    CustomerIdResponse,
    DeliverableIdResponse,
    DeliveryLinkResponse,
    EditOrderServiceRequest,
    FolderPathResponse,
    FolderVisibilityRequest,
    InviteEditorRequest,
    JobIdResponse,
    OrderIdResponse,
    PartnershipIdResponse,
    QCRejectRequest,
    ReasonRequest,
    RegisterCustomerRequest,
    RenameFolderRequest,
    ReorderFoldersRequest,
    RescheduleAppointmentRequest,
    RevisionAllowanceResponse,
    RevisionLimitOverrideRequest,
    RevisionRequest,
    RevisionSettingsRequest,
    ScheduleAppointmentRequest,
    StatusResponse,
    SubmitJobReviewRequest,
    UpdateJobCoverRequest,
    UploadDeliverableRequest,
)
from studio.appointment.scheduling import (
    CancelAppointment,
    RemoveAppointment,
    RescheduleAppointment,
    ScheduleAppointment,
)
from studio.customer.management import RegisterCustomer, SetRevisionLimitOverride
from studio.deliverable.comments import AddFileComment, UpdateFileCommentStatus, thread_for
from studio.deliverable.deliverable import Deliverable
from studio.deliverable.folders import (
    CreateFolder,
    DeleteFolder,
    RenameFolder,
    ReorderFolders,
    SetFolderVisibility,
)
from studio.deliverable.gallery import Audience, folder_gallery, gallery_for_token
from studio.deliverable.permissions import ensure_participant
from studio.deliverable.upload import UploadDeliverable
from studio.errors import AssignmentConflict, StaleWrite
from studio.job.creation import CreateJob
from studio.job.delivery import DeliverJob, IssueDeliveryLink
from studio.job.job import Job
from studio.job.management import CancelJob, UpdateJobCover
from studio.order.acceptance import AcceptOrder, CancelOrder, DeclineOrder
from studio.order.assignment import AssignOrder
from studio.order.creation import CreateOrder
from studio.order.order import Order
from studio.order.quality_check import QCAccept, QCReject
from studio.order.revision import RequestRevision, can_request_revision
from studio.order.services import EditOrderService
from studio.order.submission import SubmitForReview
from studio.review.submission import SubmitJobReview
from studio.tenant.configuration import UpdateRevisionSettings
from studio.tenant.invitation import AcceptPartnership, EndPartnership, InviteEditor


def _actor(principal: Principal) -> dict:
    return {"actor_id": principal.user_id, "actor_role": principal.role, "tenant_id": principal.tenant_id}


def _process(command):
    try:
        return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError as exc:
        # Version retries are exhausted; report the race as a conflict
        if isinstance(command, AssignOrder):
            raise AssignmentConflict("Order was assigned by another request", order_id=str(command.order_id)) from exc
        raise StaleWrite("Record was modified by another request", command=command.__class__.__name__) from exc


# ---------------------------------------------------------------------------
# Job Router
# ---------------------------------------------------------------------------
job_router = APIRouter(prefix="/jobs", tags=["jobs"])


@job_router.post("", status_code=201, response_model=JobIdResponse)
async def create_job(body: CreateJobRequest, principal: Principal = Depends(current_principal)) -> JobIdResponse:
    """Book a new shoot."""
    command = CreateJob(address=body.address, customer_id=body.customer_id, notes=body.notes, **_actor(principal))
    return JobIdResponse(job_id=_process(command))


@job_router.get("/{job_id}")
async def get_job(job_id: str, principal: Principal = Depends(current_principal)) -> dict:
    job = current_domain.repository_for(Job).get(job_id)
    ensure_participant(job, principal.user_id, principal.role, principal.tenant_id)
    return job.to_dict()


@job_router.put("/{job_id}/cover", response_model=StatusResponse)
async def update_job_cover(
    job_id: str, body: UpdateJobCoverRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    _process(UpdateJobCover(job_id=job_id, cover_image=body.cover_image or "", **_actor(principal)))
    return StatusResponse(status="cover_updated")


@job_router.put("/{job_id}/cancel", response_model=StatusResponse)
async def cancel_job(
    job_id: str, body: ReasonRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    """Cancel a job that has no work under way."""
    _process(CancelJob(job_id=job_id, reason=body.reason, **_actor(principal)))
    return StatusResponse(status="cancelled")


@job_router.put("/{job_id}/deliver", response_model=DeliveryLinkResponse)
async def deliver_job(job_id: str, principal: Principal = Depends(current_principal)) -> DeliveryLinkResponse:
    """Deliver the job to its customer. Every open order is force-delivered."""
    link = _process(DeliverJob(job_id=job_id, **_actor(principal)))
    return DeliveryLinkResponse(status="delivered", delivery_link=link)


@job_router.post("/{job_id}/delivery-link", response_model=DeliveryLinkResponse)
async def issue_delivery_link(job_id: str, principal: Principal = Depends(current_principal)) -> DeliveryLinkResponse:
    link = _process(IssueDeliveryLink(job_id=job_id, **_actor(principal)))
    return DeliveryLinkResponse(status="issued", delivery_link=link)


@job_router.post("/{job_id}/review", status_code=201, response_model=StatusResponse)
async def submit_job_review(
    job_id: str, body: SubmitJobReviewRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = SubmitJobReview(
        job_id=job_id,
        rating=body.rating,
        review=body.review,
        actor_id=principal.user_id,
        actor_email=body.email,
    )
    _process(command)
    return StatusResponse(status="review_submitted")


@job_router.post("/{job_id}/appointments", status_code=201, response_model=AppointmentIdResponse)
async def schedule_appointment(
    job_id: str, body: ScheduleAppointmentRequest, principal: Principal = Depends(current_principal)
) -> AppointmentIdResponse:
    command = ScheduleAppointment(
        job_id=job_id,
        start_time=body.start_time,
        duration_minutes=body.duration_minutes,
        assigned_to=body.assigned_to,
        notes=body.notes,
        **_actor(principal),
    )
    return AppointmentIdResponse(appointment_id=_process(command))


@job_router.get("/{job_id}/gallery")
async def get_gallery(job_id: str, principal: Principal = Depends(current_principal)) -> dict:
    """The job's folder tree, filtered for the caller's audience."""
    job = current_domain.repository_for(Job).get(job_id)
    ensure_participant(job, principal.user_id, principal.role, principal.tenant_id)
    audiences = {Role.CUSTOMER.value: Audience.CUSTOMER, Role.EDITOR.value: Audience.EDITOR}
    return folder_gallery(job_id, audiences.get(principal.role, Audience.TENANT).value)


@job_router.post("/{job_id}/folders", status_code=201, response_model=FolderPathResponse)
async def create_folder(
    job_id: str, body: CreateFolderRequest, principal: Principal = Depends(current_principal)
) -> FolderPathResponse:
    command = CreateFolder(
        job_id=job_id,
        name=body.name,
        parent_folder_path=body.parent_folder_path,
        order_id=body.order_id,
        **_actor(principal),
    )
    return FolderPathResponse(folder_path=_process(command))


@job_router.put("/{job_id}/folders/name", response_model=StatusResponse)
async def rename_folder(
    job_id: str, body: RenameFolderRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    _process(RenameFolder(job_id=job_id, folder_path=body.folder_path, name=body.name, **_actor(principal)))
    return StatusResponse(status="renamed")


@job_router.put("/{job_id}/folders/visibility", response_model=StatusResponse)
async def set_folder_visibility(
    job_id: str, body: FolderVisibilityRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = SetFolderVisibility(
        job_id=job_id, folder_path=body.folder_path, is_visible=body.is_visible, **_actor(principal)
    )
    _process(command)
    return StatusResponse(status="visible" if body.is_visible else "hidden")


@job_router.put("/{job_id}/folders/order", response_model=StatusResponse)
async def reorder_folders(
    job_id: str, body: ReorderFoldersRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    _process(ReorderFolders(job_id=job_id, folder_paths=json.dumps(body.folder_paths), **_actor(principal)))
    return StatusResponse(status="reordered")


@job_router.delete("/{job_id}/folders", response_model=StatusResponse)
async def delete_folder(
    job_id: str, folder_path: str, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    """Delete a folder and everything under it. Refused while any file belongs to an order."""
    _process(DeleteFolder(job_id=job_id, folder_path=folder_path, **_actor(principal)))
    return StatusResponse(status="deleted")


@job_router.post("/{job_id}/files", status_code=201, response_model=DeliverableIdResponse)
async def upload_deliverable(
    job_id: str, body: UploadDeliverableRequest, principal: Principal = Depends(current_principal)
) -> DeliverableIdResponse:
    """Upload a file. A file with the same name in the same folder is replaced."""
    command = UploadDeliverable(
        job_id=job_id,
        file_name=body.file_name,
        content=body.content,
        mime_type=body.mime_type,
        status=body.status,
        folder_path=body.folder_path,
        order_id=body.order_id,
        **_actor(principal),
    )
    return DeliverableIdResponse(deliverable_id=_process(command))


# ---------------------------------------------------------------------------
# Appointment Router
# ---------------------------------------------------------------------------
appointment_router = APIRouter(prefix="/appointments", tags=["appointments"])


@appointment_router.put("/{appointment_id}/reschedule", response_model=StatusResponse)
async def reschedule_appointment(
    appointment_id: str, body: RescheduleAppointmentRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = RescheduleAppointment(
        appointment_id=appointment_id,
        start_time=body.start_time,
        duration_minutes=body.duration_minutes,
        **_actor(principal),
    )
    _process(command)
    return StatusResponse(status="rescheduled")


@appointment_router.put("/{appointment_id}/cancel", response_model=StatusResponse)
async def cancel_appointment(appointment_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    _process(CancelAppointment(appointment_id=appointment_id, **_actor(principal)))
    return StatusResponse(status="cancelled")


@appointment_router.delete("/{appointment_id}", response_model=StatusResponse)
async def remove_appointment(appointment_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    """Remove an appointment. Calendar-linked appointments are cancelled instead."""
    outcome = _process(RemoveAppointment(appointment_id=appointment_id, **_actor(principal)))
    return StatusResponse(status=outcome)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest, principal: Principal = Depends(current_principal)) -> OrderIdResponse:
    """Create an editing order against a job."""
    command = CreateOrder(
        job_id=body.job_id,
        customer_id=body.customer_id,
        services=json.dumps([service.model_dump() for service in body.services]),
        **_actor(principal),
    )
    return OrderIdResponse(order_id=_process(command))


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    """The order, with ``version`` to send back as ``expected_version`` when assigning."""
    order = current_domain.repository_for(Order).get(order_id)
    payload = order.to_dict()
    payload.pop("_version", None)
    payload["version"] = order._version
    return payload


@order_router.put("/{order_id}/assign", response_model=StatusResponse)
async def assign_order(
    order_id: str, body: AssignOrderRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    """Assign an editor. Only one of several concurrent assignments succeeds."""
    command = AssignOrder(
        order_id=order_id,
        editor_id=body.editor_id,
        expected_version=body.expected_version,
        target_status=body.target_status,
        **_actor(principal),
    )
    _process(command)
    return StatusResponse(status="assigned")


@order_router.put("/{order_id}/accept", response_model=StatusResponse)
async def accept_order(order_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    _process(AcceptOrder(order_id=order_id, editor_id=principal.user_id))
    return StatusResponse(status="accepted")


@order_router.put("/{order_id}/decline", response_model=StatusResponse)
async def decline_order(
    order_id: str, body: ReasonRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    _process(DeclineOrder(order_id=order_id, editor_id=principal.user_id, reason=body.reason))
    return StatusResponse(status="declined")


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str, body: ReasonRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    _process(CancelOrder(order_id=order_id, reason=body.reason, **_actor(principal)))
    return StatusResponse(status="cancelled")


@order_router.put("/{order_id}/submit", response_model=StatusResponse)
async def submit_for_review(order_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    """Hand finished work to quality control."""
    _process(SubmitForReview(order_id=order_id, editor_id=principal.user_id))
    return StatusResponse(status="submitted")


@order_router.put("/{order_id}/qc/accept", response_model=StatusResponse)
async def qc_accept(order_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    command = QCAccept(
        order_id=order_id,
        approver_id=principal.user_id,
        approver_role=principal.role,
        tenant_id=principal.tenant_id,
    )
    _process(command)
    return StatusResponse(status="completed")


@order_router.put("/{order_id}/qc/reject", response_model=StatusResponse)
async def qc_reject(
    order_id: str, body: QCRejectRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = QCReject(
        order_id=order_id,
        approver_id=principal.user_id,
        approver_role=principal.role,
        notes=body.notes,
        tenant_id=principal.tenant_id,
    )
    _process(command)
    return StatusResponse(status="in_revision")


@order_router.get("/{order_id}/revision-allowance", response_model=RevisionAllowanceResponse)
async def revision_allowance(order_id: str) -> RevisionAllowanceResponse:
    """How many more revision rounds the customer may request."""
    return RevisionAllowanceResponse(**can_request_revision(order_id).to_dict())


@order_router.post("/{order_id}/revisions", response_model=StatusResponse)
async def request_revision(
    order_id: str, body: RevisionRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    _process(RequestRevision(order_id=order_id, notes=body.notes, **_actor(principal)))
    return StatusResponse(status="in_revision")


@order_router.put("/{order_id}/services/{line_id}", response_model=StatusResponse)
async def edit_order_service(
    order_id: str, line_id: str, body: EditOrderServiceRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = EditOrderService(
        order_id=order_id,
        line_id=line_id,
        quantity=body.quantity,
        instructions=json.dumps(body.instructions) if body.instructions is not None else None,
        export_types=json.dumps(body.export_types) if body.export_types is not None else None,
        **_actor(principal),
    )
    _process(command)
    return StatusResponse(status="updated")


# ---------------------------------------------------------------------------
# File Router
# ---------------------------------------------------------------------------
file_router = APIRouter(prefix="/files", tags=["files"])


@file_router.get("/{deliverable_id}/comments")
async def list_file_comments(deliverable_id: str, principal: Principal = Depends(current_principal)) -> list[dict]:
    deliverable = current_domain.repository_for(Deliverable).get(deliverable_id)
    job = current_domain.repository_for(Job).get(deliverable.job_id)
    ensure_participant(job, principal.user_id, principal.role, principal.tenant_id)
    return thread_for(deliverable_id)


@file_router.post("/{deliverable_id}/comments", status_code=201, response_model=CommentIdResponse)
async def add_file_comment(
    deliverable_id: str, body: AddFileCommentRequest, principal: Principal = Depends(current_principal)
) -> CommentIdResponse:
    command = AddFileComment(
        deliverable_id=deliverable_id,
        body=body.body,
        parent_comment_id=body.parent_comment_id,
        **_actor(principal),
    )
    return CommentIdResponse(comment_id=_process(command))


@file_router.put("/comments/{comment_id}/status", response_model=StatusResponse)
async def update_file_comment_status(
    comment_id: str, body: CommentStatusRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    _process(UpdateFileCommentStatus(comment_id=comment_id, status=body.status, **_actor(principal)))
    return StatusResponse(status=body.status)


# ---------------------------------------------------------------------------
# Delivery Router (public, addressed by delivery token)
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/delivery", tags=["delivery"])


@delivery_router.get("/{delivery_token}")
async def delivered_gallery(delivery_token: str) -> dict:
    return gallery_for_token(delivery_token)


# ---------------------------------------------------------------------------
# Tenant Router
# ---------------------------------------------------------------------------
tenant_router = APIRouter(prefix="/tenant", tags=["tenant"])


@tenant_router.put("/settings/revisions", response_model=StatusResponse)
async def update_revision_settings(
    body: RevisionSettingsRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = UpdateRevisionSettings(
        enable_client_revision_limit=body.enable_client_revision_limit,
        client_revision_round_limit=body.client_revision_round_limit,
        **_actor(principal),
    )
    _process(command)
    return StatusResponse(status="updated")


@tenant_router.post("/customers", status_code=201, response_model=CustomerIdResponse)
async def register_customer(
    body: RegisterCustomerRequest, principal: Principal = Depends(current_principal)
) -> CustomerIdResponse:
    command = RegisterCustomer(
        tenant_id=principal.tenant_id,
        name=body.name,
        email=body.email,
        revision_limit_override=body.revision_limit_override,
    )
    return CustomerIdResponse(customer_id=_process(command))


@tenant_router.put("/customers/{customer_id}/revision-limit", response_model=StatusResponse)
async def set_revision_limit_override(
    customer_id: str, body: RevisionLimitOverrideRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = SetRevisionLimitOverride(
        customer_id=customer_id,
        revision_limit_override=body.revision_limit_override or "",
        **_actor(principal),
    )
    _process(command)
    return StatusResponse(status="updated")


@tenant_router.post("/partnerships", status_code=201, response_model=PartnershipIdResponse)
async def invite_editor(body: InviteEditorRequest, principal: Principal = Depends(current_principal)) -> PartnershipIdResponse:
    command = InviteEditor(editor_email=body.editor_email, **_actor(principal))
    return PartnershipIdResponse(partnership_id=_process(command))


@tenant_router.put("/partnerships/{partnership_id}/accept", response_model=StatusResponse)
async def accept_partnership(
    partnership_id: str, body: AcceptPartnershipRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = AcceptPartnership(
        partnership_id=partnership_id, editor_id=principal.user_id, invite_token=body.invite_token
    )
    _process(command)
    return StatusResponse(status="active")


@tenant_router.put("/partnerships/{partnership_id}/end", response_model=StatusResponse)
async def end_partnership(partnership_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    _process(EndPartnership(partnership_id=partnership_id, **_actor(principal)))
    return StatusResponse(status="ended")
