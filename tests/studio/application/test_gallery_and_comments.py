"""Application tests for audience-filtered galleries and file comment threads."""

import base64
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from studio.deliverable.comments import AddFileComment, UpdateFileCommentStatus, thread_for
from studio.deliverable.deliverable import Deliverable
from studio.deliverable.folders import CreateFolder, SetFolderVisibility
from studio.deliverable.gallery import folder_gallery, gallery_for_token
from studio.deliverable.upload import UploadDeliverable
from studio.errors import Forbidden
from studio.job.job import Job


def _names(gallery):
    names = [f["name"] for f in gallery["loose_files"]]
    for folder in gallery["folders"]:
        names.extend(f["name"] for f in folder["files"])
    return sorted(names)


class TestCustomerGallery:
    def test_order_work_hidden_until_qc_passes(self, ops, job_id):
        order_id = ops.create_order()
        ops.assign(order_id)
        ops.upload_completed(order_id, "garden.jpg")

        assert _names(folder_gallery(job_id, "tenant")) == ["garden.jpg"]
        assert _names(folder_gallery(job_id, "customer")) == []

        ops.submit(order_id)
        ops.qc_accept(order_id)
        assert _names(folder_gallery(job_id, "customer")) == ["garden.jpg"]

    def test_client_inputs_are_not_shown_to_customer(self, job_id, customer_id):
        current_domain.process(
            UploadDeliverable(
                job_id=job_id,
                file_name="raw.dng",
                content=base64.b64encode(b"raw").decode(),
                status="for_editing",
                actor_id=customer_id,
                actor_role="customer",
            ),
            asynchronous=False,
        )
        assert _names(folder_gallery(job_id, "editor")) == ["raw.dng"]
        assert _names(folder_gallery(job_id, "customer")) == []

    def test_hidden_folders_are_left_out_with_their_children(self, job_id, partner):
        parent = current_domain.process(CreateFolder(job_id=job_id, name="Outtakes", **partner), asynchronous=False)
        current_domain.process(
            CreateFolder(job_id=job_id, name="Blurry", parent_folder_path=parent, **partner), asynchronous=False
        )
        current_domain.process(
            SetFolderVisibility(job_id=job_id, folder_path=parent, is_visible=False, **partner),
            asynchronous=False,
        )
        assert len(folder_gallery(job_id, "tenant")["folders"]) == 2
        assert folder_gallery(job_id, "customer")["folders"] == []

    def test_expired_links_are_refreshed_on_read(self, ops, job_id):
        order_id = ops.create_order()
        ops.assign(order_id)
        deliverable_id = ops.upload_completed(order_id)

        repo = current_domain.repository_for(Deliverable)
        deliverable = repo.get(deliverable_id)
        stale_url = deliverable.download_url
        deliverable.set_download_url(stale_url, datetime.now(UTC) - timedelta(hours=1))
        repo.add(deliverable)

        view = folder_gallery(job_id, "tenant")["loose_files"][0]
        assert view["download_url"] != stale_url
        assert not repo.get(deliverable_id).download_url_expired()


class TestDeliveryToken:
    def test_token_gallery_after_delivery(self, ops, job_id):
        ops.to_completed()
        ops.deliver_job()
        token = current_domain.repository_for(Job).get(job_id).delivery_token

        gallery = gallery_for_token(token)
        assert gallery["audience"] == "customer"
        assert gallery["address"] == "12 Harbour Road, Brighton"
        assert _names(gallery) == ["kitchen.jpg"]

    def test_unknown_token(self):
        with pytest.raises(ObjectNotFoundError):
            gallery_for_token("not-a-token")


def _comment(deliverable_id, actor_id, actor_role, body, **extra):
    return current_domain.process(
        AddFileComment(deliverable_id=deliverable_id, body=body, actor_id=actor_id, actor_role=actor_role, **extra),
        asynchronous=False,
    )


class TestFileComments:
    def test_replies_nest_under_their_parent(self, ops, customer_id, editor_id):
        order_id = ops.to_completed()
        deliverable_id = str(current_domain.repository_for(Deliverable).completed_for_order(order_id)[0].id)

        root = _comment(deliverable_id, customer_id, "customer", "Can the sky be bluer?")
        _comment(deliverable_id, editor_id, "editor", "On it", parent_comment_id=root)

        thread = thread_for(deliverable_id)
        assert len(thread) == 1
        assert thread[0]["body"] == "Can the sky be bluer?"
        assert [r["body"] for r in thread[0]["replies"]] == ["On it"]

    def test_reply_must_stay_on_the_same_file(self, ops, customer_id):
        order_id = ops.create_order()
        ops.assign(order_id)
        first = ops.upload_completed(order_id, "a.jpg")
        second = ops.upload_completed(order_id, "b.jpg")
        root = _comment(first, customer_id, "customer", "Crop tighter")

        with pytest.raises(ValidationError):
            _comment(second, customer_id, "customer", "Same here", parent_comment_id=root)

    def test_status_moves_to_resolved(self, ops, customer_id, editor_id):
        order_id = ops.create_order()
        ops.assign(order_id)
        deliverable_id = ops.upload_completed(order_id)
        comment_id = _comment(deliverable_id, customer_id, "customer", "Lamp is off")

        current_domain.process(
            UpdateFileCommentStatus(comment_id=comment_id, status="resolved", actor_id=editor_id, actor_role="editor"),
            asynchronous=False,
        )
        assert thread_for(deliverable_id)[0]["status"] == "resolved"

    def test_outsiders_cannot_comment(self, ops):
        order_id = ops.create_order()
        ops.assign(order_id)
        deliverable_id = ops.upload_completed(order_id)
        with pytest.raises(Forbidden):
            _comment(deliverable_id, "cust-stranger", "customer", "Hello")
