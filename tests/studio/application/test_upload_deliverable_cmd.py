"""Application tests for uploads: placement, replacement and storage failures."""

import base64

import pytest
from protean import current_domain

from studio.activity.activity import Activity
from studio.deliverable.deliverable import Deliverable
from studio.deliverable.folder import Folder
from studio.deliverable.folders import CreateFolder
from studio.deliverable.upload import UploadDeliverable
from studio.errors import Conflict, Forbidden, UpstreamFailure
from studio.storage import get_storage


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def _upload(job_id, actor_id, actor_role, file_name="lounge.jpg", data=b"pixels", **extra):
    return current_domain.process(
        UploadDeliverable(
            job_id=job_id,
            file_name=file_name,
            content=_b64(data),
            mime_type="image/jpeg",
            actor_id=actor_id,
            actor_role=actor_role,
            **extra,
        ),
        asynchronous=False,
    )


def _deliverable(deliverable_id):
    return current_domain.repository_for(Deliverable).get(deliverable_id)


class TestCompletedUploads:
    def test_upload_writes_blob_and_signs_url(self, ops):
        order_id = ops.create_order()
        ops.assign(order_id)
        deliverable_id = ops.upload_completed(order_id, "Front Elevation.jpg", b"v1")

        deliverable = _deliverable(deliverable_id)
        assert deliverable.storage_path.startswith(f"completed/{ops.job_id}/files/")
        assert deliverable.storage_path.endswith("_Front_Elevation.jpg")
        assert get_storage().blobs[deliverable.storage_path] == b"v1"
        assert deliverable.download_url
        assert deliverable.order_id == order_id

    def test_same_name_in_same_folder_replaces(self, ops, job_id):
        order_id = ops.create_order()
        ops.assign(order_id)
        first = _deliverable(ops.upload_completed(order_id, "kitchen.jpg", b"v1"))
        second_id = ops.upload_completed(order_id, "kitchen.jpg", b"v2")

        remaining = current_domain.repository_for(Deliverable).completed_named(job_id, None, "kitchen.jpg", order_id)
        assert [str(d.id) for d in remaining] == [second_id]
        assert get_storage().deleted == [first.storage_path]
        assert get_storage().blobs[_deliverable(second_id).storage_path] == b"v2"

        actions = [a.action for a in current_domain.repository_for(Activity)._dao.query.filter(job_id=job_id).all().items]
        assert "file_replaced" in actions

    def test_failed_delete_of_previous_version_aborts(self, ops, job_id):
        order_id = ops.create_order()
        ops.assign(order_id)
        first = _deliverable(ops.upload_completed(order_id, "kitchen.jpg", b"v1"))
        get_storage().fail_delete_of(first.storage_path)

        with pytest.raises(UpstreamFailure):
            ops.upload_completed(order_id, "kitchen.jpg", b"v2")

        remaining = current_domain.repository_for(Deliverable).completed_named(job_id, None, "kitchen.jpg", order_id)
        assert [str(d.id) for d in remaining] == [str(first.id)]
        assert get_storage().blobs[first.storage_path] == b"v1"

    def test_same_loose_name_in_another_order_is_kept(self, ops, job_id):
        first_order = ops.create_order()
        ops.assign(first_order)
        second_order = ops.create_order()
        ops.assign(second_order)

        first_id = ops.upload_completed(first_order, "bath.jpg", b"first")
        second_id = ops.upload_completed(second_order, "bath.jpg", b"second")

        repo = current_domain.repository_for(Deliverable)
        assert [str(d.id) for d in repo.completed_named(job_id, None, "bath.jpg", first_order)] == [first_id]
        assert [str(d.id) for d in repo.completed_named(job_id, None, "bath.jpg", second_order)] == [second_id]
        assert get_storage().deleted == []
        assert get_storage().blobs[_deliverable(first_id).storage_path] == b"first"

    def test_write_failure_raises_and_stores_nothing(self, ops, job_id):
        order_id = ops.create_order()
        ops.assign(order_id)
        get_storage().configure(should_succeed=False, failure_reason="Bucket unreachable")

        with pytest.raises(UpstreamFailure):
            ops.upload_completed(order_id)
        assert current_domain.repository_for(Deliverable).for_job(job_id) == []

    def test_only_the_assigned_editor_uploads_order_work(self, ops, job_id, partner_editor):
        partner_editor("editor-002")
        order_id = ops.create_order()
        ops.assign(order_id)
        with pytest.raises(Forbidden):
            _upload(job_id, "editor-002", "editor", status="completed", order_id=order_id)

    def test_order_must_be_editable(self, ops, job_id, editor_id):
        order_id = ops.to_human_check()
        with pytest.raises(Conflict):
            _upload(job_id, editor_id, "editor", status="completed", order_id=order_id)

    def test_upload_into_folder_binds_it_to_the_order(self, ops, job_id, editor_id):
        order_id = ops.create_order()
        ops.assign(order_id)
        folder_path = current_domain.process(
            CreateFolder(job_id=job_id, name="Interiors", actor_id=editor_id, actor_role="editor"),
            asynchronous=False,
        )
        _upload(job_id, editor_id, "editor", status="completed", order_id=order_id, folder_path=folder_path)

        folder = current_domain.repository_for(Folder).get_by_path(job_id, folder_path)
        assert folder.order_id == order_id

        inherited = _upload(job_id, editor_id, "editor", "hall.jpg", status="completed", folder_path=folder_path)
        deliverable = _deliverable(inherited)
        assert deliverable.order_id == order_id
        assert deliverable.storage_path.startswith(f"completed/{job_id}/{folder_path}/")


class TestClientInputs:
    def test_customer_uploads_for_editing(self, job_id, customer_id):
        deliverable_id = _upload(job_id, customer_id, "customer", "raw_001.dng", status="for_editing")
        deliverable = _deliverable(deliverable_id)
        assert deliverable.status == "for_editing"
        assert deliverable.storage_path.startswith(f"orders/{job_id}/")
        assert (deliverable.expires_at - deliverable.uploaded_at).days == 14

    def test_customer_cannot_upload_completed_work(self, job_id, customer_id):
        with pytest.raises(Forbidden):
            _upload(job_id, customer_id, "customer", status="completed")

    def test_stranger_cannot_upload(self, job_id):
        with pytest.raises(Forbidden):
            _upload(job_id, "cust-stranger", "customer", status="for_editing")
