"""Delivery views: the folder tree of a job as seen by each audience.

Tenant and editor audiences see every folder and file. The customer audience
is a display filter, not an access boundary: hidden folders and client input
files are left out, and order-bound work appears only once its order passed
QC. Signed download URLs that have expired are regenerated on read.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from studio.deliverable.deliverable import Deliverable
from studio.deliverable.folder import Folder
from studio.deliverable.paths import is_within
from studio.job.job import Job
from studio.storage import get_storage, signed_url_ttl_hours


class Audience(Enum):
    TENANT = "tenant"
    EDITOR = "editor"
    CUSTOMER = "customer"


def _customer_can_see(deliverable: Deliverable) -> bool:
    if not deliverable.is_completed:
        return False
    if deliverable.order_id and deliverable.qc_approved_at is None:
        return False
    return True


def _fresh_url(deliverable: Deliverable, now: datetime) -> str:
    if deliverable.download_url_expired(now):
        signed = get_storage().signed_url(deliverable.storage_path, signed_url_ttl_hours())
        deliverable.set_download_url(signed.url, signed.expires_at)
        current_domain.repository_for(Deliverable).add(deliverable)
    return deliverable.download_url


def _file_view(deliverable: Deliverable, now: datetime) -> dict:
    return {
        "id": str(deliverable.id),
        "name": deliverable.original_name,
        "size": deliverable.size,
        "mime_type": deliverable.mime_type,
        "status": deliverable.status,
        "order_id": str(deliverable.order_id) if deliverable.order_id else None,
        "download_url": _fresh_url(deliverable, now),
        "qc_approved": deliverable.qc_approved_at is not None,
    }


def folder_gallery(job_id: str, audience: str = Audience.TENANT.value) -> dict:
    audience = Audience(audience)
    now = datetime.now(UTC)
    folders = current_domain.repository_for(Folder).for_job(job_id)
    files = current_domain.repository_for(Deliverable).for_job(job_id)

    if audience == Audience.CUSTOMER:
        hidden = [f.folder_path for f in folders if not f.is_visible]
        folders = [f for f in folders if not any(is_within(f.folder_path, h) for h in hidden)]
        files = [
            d
            for d in files
            if _customer_can_see(d) and not any(is_within(d.folder_path, h) for h in hidden)
        ]

    files_by_folder: dict[str | None, list[Deliverable]] = {}
    for deliverable in sorted(files, key=lambda d: d.original_name):
        files_by_folder.setdefault(deliverable.folder_path or None, []).append(deliverable)

    return {
        "job_id": str(job_id),
        "audience": audience.value,
        "folders": [
            {
                "folder_path": f.folder_path,
                "parent_path": f.parent_path,
                "name": f.display_name,
                "is_visible": f.is_visible,
                "display_order": f.display_order,
                "order_id": str(f.order_id) if f.order_id else None,
                "files": [_file_view(d, now) for d in files_by_folder.get(f.folder_path, [])],
            }
            for f in folders
        ],
        "loose_files": [_file_view(d, now) for d in files_by_folder.get(None, [])],
    }


def gallery_for_token(delivery_token: str) -> dict:
    """Customer view of a delivered job, looked up by its delivery token."""
    job = current_domain.repository_for(Job)._dao.query.filter(delivery_token=delivery_token).all().first
    if job is None or not job.is_delivered:
        raise ObjectNotFoundError("No delivered job matches this link")
    gallery = folder_gallery(str(job.id), Audience.CUSTOMER.value)
    gallery["address"] = job.address
    gallery["cover_image"] = job.cover_image
    return gallery
