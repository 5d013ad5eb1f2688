"""Integration tests for the studio API endpoints via TestClient."""

import base64

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from protean.exceptions import ExpectedVersionError

from studio.api import appointment_router, delivery_router, file_router, job_router, order_router, tenant_router
from studio.api.errors import VERSION_CONFLICT_HINT, register_studio_exception_handlers
from studio.domain import studio
from studio.tenant.partnership import EditorPartnership

PARTNER = {"X-User-Id": "partner-001", "X-User-Role": "partner", "X-Tenant-Id": "tenant-001"}
EDITOR = {"X-User-Id": "editor-001", "X-User-Role": "editor"}


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (job_router, appointment_router, order_router, file_router, delivery_router, tenant_router):
        app.include_router(router)
    register_studio_exception_handlers(app)
    return TestClient(app)


def _activate_editor(client, editor_headers=EDITOR):
    response = client.post("/tenant/partnerships", json={"editor_email": "ed@example.com"}, headers=PARTNER)
    assert response.status_code == 201
    partnership_id = response.json()["partnership_id"]
    token = current_domain.repository_for(EditorPartnership).get(partnership_id).invite_token
    response = client.put(
        f"/tenant/partnerships/{partnership_id}/accept", json={"invite_token": token}, headers=editor_headers
    )
    assert response.status_code == 200


def _create_customer(client):
    response = client.post("/tenant/customers", json={"name": "Dana Whitfield", "email": "dana@example.com"}, headers=PARTNER)
    assert response.status_code == 201
    return response.json()["customer_id"]


def _create_job(client, customer_id=None):
    response = client.post(
        "/jobs", json={"address": "7 Ship Street, Brighton", "customer_id": customer_id}, headers=PARTNER
    )
    assert response.status_code == 201
    return response.json()["job_id"]


def _create_order(client, job_id):
    response = client.post(
        "/orders",
        json={"job_id": job_id, "services": [{"service_id": "svc-hdr", "quantity": 5}]},
        headers=PARTNER,
    )
    assert response.status_code == 201
    return response.json()["order_id"]


def _upload(client, job_id, order_id, name="bath.jpg"):
    return client.post(
        f"/jobs/{job_id}/files",
        json={
            "file_name": name,
            "content": base64.b64encode(b"edited").decode(),
            "mime_type": "image/jpeg",
            "status": "completed",
            "order_id": order_id,
        },
        headers=EDITOR,
    )


def _walk_to_completed(client, job_id):
    order_id = _create_order(client, job_id)
    client.put(f"/orders/{order_id}/assign", json={"editor_id": "editor-001", "target_status": "processing"}, headers=PARTNER)
    _upload(client, job_id, order_id)
    client.put(f"/orders/{order_id}/submit", headers=EDITOR)
    client.put(f"/orders/{order_id}/qc/accept", headers=PARTNER)
    return order_id


class TestJobAPI:
    def test_create_and_read_job(self, client):
        job_id = _create_job(client)
        response = client.get(f"/jobs/{job_id}", headers=PARTNER)
        assert response.status_code == 200
        assert response.json()["status"] == "booked"

    def test_missing_identity_headers(self, client):
        response = client.post("/jobs", json={"address": "1 Nowhere"})
        assert response.status_code == 422

    def test_unknown_job_is_404(self, client):
        response = client.get("/jobs/does-not-exist", headers=PARTNER)
        assert response.status_code == 404


class TestOrderAPI:
    def test_full_lifecycle(self, client):
        _activate_editor(client)
        job_id = _create_job(client)
        order_id = _walk_to_completed(client, job_id)

        response = client.get(f"/orders/{order_id}", headers=PARTNER)
        assert response.json()["status"] == "completed"

    def test_second_assignment_is_409_with_hint(self, client):
        _activate_editor(client)
        job_id = _create_job(client)
        order_id = _create_order(client, job_id)

        first = client.put(f"/orders/{order_id}/assign", json={"editor_id": "editor-001"}, headers=PARTNER)
        second = client.put(f"/orders/{order_id}/assign", json={"editor_id": "editor-001"}, headers=PARTNER)

        assert first.status_code == 200
        assert second.status_code == 409
        assert "Re-fetch" in second.json()["hint"]

    def test_assigning_a_stranger_is_403(self, client):
        job_id = _create_job(client)
        order_id = _create_order(client, job_id)
        response = client.put(f"/orders/{order_id}/assign", json={"editor_id": "editor-zzz"}, headers=PARTNER)
        assert response.status_code == 403

    def test_submit_without_files_is_400(self, client):
        _activate_editor(client)
        job_id = _create_job(client)
        order_id = _create_order(client, job_id)
        client.put(f"/orders/{order_id}/assign", json={"editor_id": "editor-001", "target_status": "processing"}, headers=PARTNER)
        response = client.put(f"/orders/{order_id}/submit", headers=EDITOR)
        assert response.status_code == 400

    def test_revision_limit_is_403_with_allowance(self, client):
        _activate_editor(client)
        customer_id = _create_customer(client)
        job_id = _create_job(client, customer_id)
        order_id = _walk_to_completed(client, job_id)
        client.put(
            "/tenant/settings/revisions",
            json={"enable_client_revision_limit": True, "client_revision_round_limit": 0},
            headers=PARTNER,
        )
        client.put(f"/jobs/{job_id}/deliver", headers=PARTNER)

        allowance = client.get(f"/orders/{order_id}/revision-allowance", headers=PARTNER).json()
        assert allowance["allowed"] is False

        customer = {"X-User-Id": customer_id, "X-User-Role": "customer"}
        response = client.post(f"/orders/{order_id}/revisions", json={"notes": "Brighter"}, headers=customer)
        assert response.status_code == 403
        assert response.json()["max_rounds"] == 0


class TestVersionConflicts:
    def test_order_exposes_version_for_assignment(self, client):
        _activate_editor(client)
        job_id = _create_job(client)
        order_id = _create_order(client, job_id)

        order = client.get(f"/orders/{order_id}", headers=PARTNER).json()
        assert "_version" not in order
        version = order["version"]

        stale = client.put(
            f"/orders/{order_id}/assign",
            json={"editor_id": "editor-001", "expected_version": version + 1},
            headers=PARTNER,
        )
        assert stale.status_code == 409

        fresh = client.put(
            f"/orders/{order_id}/assign",
            json={"editor_id": "editor-001", "expected_version": version},
            headers=PARTNER,
        )
        assert fresh.status_code == 200
        assert client.get(f"/orders/{order_id}", headers=PARTNER).json()["version"] == version + 1

    def test_lost_assignment_race_is_409_with_hint(self, client, monkeypatch):
        _activate_editor(client)
        job_id = _create_job(client)
        order_id = _create_order(client, job_id)

        def version_race(command, asynchronous=True):
            raise ExpectedVersionError("Wrong expected version: 0 (Aggregate: Order, Version: 1)")

        monkeypatch.setattr(studio, "process", version_race)
        response = client.put(f"/orders/{order_id}/assign", json={"editor_id": "editor-001"}, headers=PARTNER)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Order was assigned by another request"
        assert "Re-fetch" in body["hint"]

    def test_lost_race_on_other_commands_is_409(self, client, monkeypatch):
        job_id = _create_job(client)
        order_id = _create_order(client, job_id)

        def version_race(command, asynchronous=True):
            raise ExpectedVersionError("Wrong expected version")

        monkeypatch.setattr(studio, "process", version_race)
        response = client.put(f"/orders/{order_id}/submit", headers=EDITOR)

        assert response.status_code == 409
        assert response.json()["command"] == "SubmitForReview"

    def test_unmapped_version_error_is_409(self):
        app = FastAPI()
        register_studio_exception_handlers(app)

        @app.get("/racy")
        async def racy():
            raise ExpectedVersionError("Wrong expected version")

        response = TestClient(app).get("/racy")

        assert response.status_code == 409
        assert response.json()["hint"] == VERSION_CONFLICT_HINT


class TestStorageErrors:
    def test_upload_failure_is_502(self, client):
        from studio.storage import get_storage

        _activate_editor(client)
        job_id = _create_job(client)
        order_id = _create_order(client, job_id)
        client.put(f"/orders/{order_id}/assign", json={"editor_id": "editor-001", "target_status": "processing"}, headers=PARTNER)
        get_storage().configure(should_succeed=False)

        response = _upload(client, job_id, order_id)
        assert response.status_code == 502


class TestFolderAndDeliveryAPI:
    def test_folder_delete_refused_with_order_files(self, client):
        _activate_editor(client)
        job_id = _create_job(client)
        order_id = _create_order(client, job_id)
        client.put(f"/orders/{order_id}/assign", json={"editor_id": "editor-001", "target_status": "processing"}, headers=PARTNER)
        folder_path = client.post(f"/jobs/{job_id}/folders", json={"name": "Bathrooms"}, headers=PARTNER).json()[
            "folder_path"
        ]
        client.post(
            f"/jobs/{job_id}/files",
            json={
                "file_name": "ensuite.jpg",
                "content": base64.b64encode(b"x").decode(),
                "status": "completed",
                "order_id": order_id,
                "folder_path": folder_path,
            },
            headers=EDITOR,
        )

        response = client.delete(f"/jobs/{job_id}/folders", params={"folder_path": folder_path}, headers=PARTNER)
        assert response.status_code == 409

    def test_delivery_link_opens_customer_gallery(self, client):
        _activate_editor(client)
        customer_id = _create_customer(client)
        job_id = _create_job(client, customer_id)
        _walk_to_completed(client, job_id)

        response = client.put(f"/jobs/{job_id}/deliver", headers=PARTNER)
        assert response.status_code == 200
        token = response.json()["delivery_link"].rsplit("/", 1)[-1]

        gallery = client.get(f"/delivery/{token}")
        assert gallery.status_code == 200
        assert gallery.json()["loose_files"][0]["name"] == "bath.jpg"

    def test_customer_gallery_requires_the_jobs_customer(self, client):
        customer_id = _create_customer(client)
        job_id = _create_job(client, customer_id)

        own = client.get(f"/jobs/{job_id}/gallery", headers={"X-User-Id": customer_id, "X-User-Role": "customer"})
        other = client.get(f"/jobs/{job_id}/gallery", headers={"X-User-Id": "cust-x", "X-User-Role": "customer"})
        assert own.status_code == 200
        assert own.json()["audience"] == "customer"
        assert other.status_code == 403


class TestAppointmentAPI:
    def test_remove_linked_appointment_cancels_it(self, client):
        job_id = _create_job(client)
        response = client.post(
            f"/jobs/{job_id}/appointments", json={"start_time": "2026-11-02T09:00:00+00:00"}, headers=PARTNER
        )
        assert response.status_code == 201
        appointment_id = response.json()["appointment_id"]

        response = client.delete(f"/appointments/{appointment_id}", headers=PARTNER)
        assert response.json()["status"] == "cancelled"
