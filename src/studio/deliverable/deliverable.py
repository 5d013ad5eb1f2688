"""Deliverable aggregate: one uploaded file.

``for_editing`` files are client inputs handed to the editor; ``completed``
files are edited outputs. A completed file bound to an order is shown to the
customer only after the order passes QC (``qc_approved_at``).
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String

from studio.deliverable.events import DeliverableApproved, DeliverableUploaded
from studio.domain import studio


class DeliverableStatus(Enum):
    FOR_EDITING = "for_editing"
    COMPLETED = "completed"


RETENTION_DAYS = {
    DeliverableStatus.FOR_EDITING: 14,
    DeliverableStatus.COMPLETED: 30,
}


@studio.aggregate
class Deliverable:
    job_id = Identifier(required=True)
    order_id = Identifier()
    editor_id = Identifier()
    folder_path = String(max_length=500)
    folder_token = String(max_length=32)
    file_name = String(required=True, max_length=300)
    original_name = String(required=True, max_length=255)
    size = Integer(min_value=0, default=0)
    mime_type = String(max_length=100)
    storage_path = String(required=True, max_length=1000)
    download_url = String(max_length=2000)
    download_url_expires_at = DateTime()
    status = String(max_length=20, choices=DeliverableStatus, default=DeliverableStatus.COMPLETED.value)
    expires_at = DateTime()
    qc_approved_at = DateTime()
    uploaded_at = DateTime()

    @classmethod
    def upload(
        cls,
        job_id: str,
        original_name: str,
        file_name: str,
        storage_path: str,
        size: int,
        status: str,
        uploaded_by: str,
        uploaded_at: datetime,
        mime_type: str | None = None,
        order_id: str | None = None,
        folder_path: str | None = None,
        folder_token: str | None = None,
        tenant_id: str | None = None,
        actor_role: str | None = None,
        replaced: list[str] | None = None,
    ):
        deliverable = cls(
            job_id=job_id,
            order_id=order_id,
            editor_id=uploaded_by,
            folder_path=folder_path,
            folder_token=folder_token,
            file_name=file_name,
            original_name=original_name,
            size=size,
            mime_type=mime_type,
            storage_path=storage_path,
            status=status,
            expires_at=uploaded_at + timedelta(days=RETENTION_DAYS[DeliverableStatus(status)]),
            uploaded_at=uploaded_at,
        )
        deliverable.raise_(
            DeliverableUploaded(
                deliverable_id=str(deliverable.id),
                job_id=str(job_id),
                tenant_id=str(tenant_id) if tenant_id else None,
                order_id=str(order_id) if order_id else None,
                folder_path=folder_path,
                original_name=original_name,
                status=status,
                size=size,
                uploaded_by=str(uploaded_by) if uploaded_by else None,
                actor_role=actor_role,
                replaced=replaced or [],
                uploaded_at=uploaded_at,
            )
        )
        return deliverable

    @property
    def is_completed(self) -> bool:
        return self.status == DeliverableStatus.COMPLETED.value

    def download_url_expired(self, now: datetime | None = None) -> bool:
        if not self.download_url or self.download_url_expires_at is None:
            return True
        now = now or datetime.now(UTC)
        expires_at = self.download_url_expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at <= now

    def set_download_url(self, url: str, expires_at: datetime) -> None:
        self.download_url = url
        self.download_url_expires_at = expires_at

    def mark_qc_approved(self, approved_at: datetime) -> None:
        if self.qc_approved_at is not None:
            return
        self.qc_approved_at = approved_at
        self.raise_(
            DeliverableApproved(
                deliverable_id=str(self.id),
                order_id=str(self.order_id),
                approved_at=approved_at,
            )
        )
