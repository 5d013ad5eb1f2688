"""Pydantic API schemas for the studio domain.

These are the external API contracts, kept separate from domain commands.
The routes translate between these schemas and commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class CreateJobRequest(BaseModel):
    address: str
    customer_id: str | None = None
    notes: str | None = None


class UpdateJobCoverRequest(BaseModel):
    cover_image: str | None = None


class ReasonRequest(BaseModel):
    reason: str | None = None


class SubmitJobReviewRequest(BaseModel):
    rating: int
    review: str | None = None
    email: str | None = None


class ScheduleAppointmentRequest(BaseModel):
    start_time: datetime
    duration_minutes: int | None = None
    assigned_to: str | None = None
    notes: str | None = None


class RescheduleAppointmentRequest(BaseModel):
    start_time: datetime
    duration_minutes: int | None = None


class OrderServiceRequest(BaseModel):
    service_id: str
    quantity: int = 1
    instructions: dict | None = None
    export_types: list[str] = Field(default_factory=list)


class CreateOrderRequest(BaseModel):
    job_id: str
    customer_id: str | None = None
    services: list[OrderServiceRequest] = Field(default_factory=list)


class AssignOrderRequest(BaseModel):
    editor_id: str
    expected_version: int | None = None
    target_status: str | None = None


class QCRejectRequest(BaseModel):
    notes: str | None = None


class RevisionRequest(BaseModel):
    notes: str | None = None


class EditOrderServiceRequest(BaseModel):
    quantity: int | None = None
    instructions: dict | None = None
    export_types: list[str] | None = None


class CreateFolderRequest(BaseModel):
    name: str
    parent_folder_path: str | None = None
    order_id: str | None = None


class RenameFolderRequest(BaseModel):
    folder_path: str
    name: str


class FolderVisibilityRequest(BaseModel):
    folder_path: str
    is_visible: bool


class ReorderFoldersRequest(BaseModel):
    folder_paths: list[str]


class UploadDeliverableRequest(BaseModel):
    file_name: str
    content: str  # base64
    mime_type: str | None = None
    status: str = "completed"
    folder_path: str | None = None
    order_id: str | None = None


class AddFileCommentRequest(BaseModel):
    body: str
    parent_comment_id: str | None = None


class CommentStatusRequest(BaseModel):
    status: str


class RegisterCustomerRequest(BaseModel):
    name: str
    email: str | None = None
    revision_limit_override: str | None = None


class RevisionLimitOverrideRequest(BaseModel):
    revision_limit_override: str | None = None


class RevisionSettingsRequest(BaseModel):
    enable_client_revision_limit: bool | None = None
    client_revision_round_limit: int | None = None


class InviteEditorRequest(BaseModel):
    editor_email: str


class AcceptPartnershipRequest(BaseModel):
    invite_token: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class JobIdResponse(BaseModel):
    job_id: str


class AppointmentIdResponse(BaseModel):
    appointment_id: str


class OrderIdResponse(BaseModel):
    order_id: str


class CustomerIdResponse(BaseModel):
    customer_id: str


class PartnershipIdResponse(BaseModel):
    partnership_id: str


class FolderPathResponse(BaseModel):
    folder_path: str


class DeliverableIdResponse(BaseModel):
    deliverable_id: str


class CommentIdResponse(BaseModel):
    comment_id: str


class DeliveryLinkResponse(BaseModel):
    status: str
    delivery_link: str


class RevisionAllowanceResponse(BaseModel):
    allowed: bool
    max_rounds: int | str
    used_rounds: int
    remaining_rounds: int | None = None
    basis: str


class StatusResponse(BaseModel):
    status: str
