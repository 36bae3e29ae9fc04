"""
End-to-end tests through the HTTP API.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from onboarding.api.deps import build_container
from onboarding.config.settings import settings
from onboarding.main import create_app

from .fakes import FakeBlobStore, FakeClassifier, FakeGateway

PREFIX = settings.API_V1_STR


def headers(user_id, role):
    return {"X-User-Id": user_id, "X-User-Role": role}


STUDENT = headers("stu-1", "student")
STAFF = headers("staff-1", "staff")
ADMIN = headers("admin-1", "admin")


@pytest.fixture
def api_gateway():
    return FakeGateway()


@pytest.fixture
def api_classifier():
    return FakeClassifier()


@pytest.fixture
def api_blobs():
    return FakeBlobStore()


@pytest.fixture
def client(session_factory, seed_settings, api_gateway, api_classifier, api_blobs):
    seed_settings()
    container = build_container(
        settings,
        session_factory,
        blob_store=api_blobs,
        gateway=api_gateway,
        classifier=api_classifier,
    )
    with TestClient(create_app(container)) as test_client:
        test_client.post(f"{PREFIX}/admin/students/stu-1", headers=ADMIN)
        yield test_client


def upload(client, type_key="10th_marksheet", name="marks.pdf"):
    return client.post(
        f"{PREFIX}/student/documents",
        headers=STUDENT,
        data={"type_key": type_key},
        files={"file": (name, b"%PDF-1.4", "application/pdf")},
    )


class TestAuth:

    def test_missing_identity(self, client):
        response = client.get(f"{PREFIX}/student/profile")
        assert response.status_code == 401

    def test_unknown_role(self, client):
        response = client.get(f"{PREFIX}/student/profile", headers=headers("x", "janitor"))
        assert response.status_code == 401

    def test_student_cannot_use_admin_routes(self, client):
        response = client.get(f"{PREFIX}/admin/analytics", headers=STUDENT)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "forbidden"

    def test_staff_cannot_use_student_routes(self, client):
        response = client.get(f"{PREFIX}/student/profile", headers=STAFF)
        assert response.status_code == 403

    def test_admin_may_act_as_staff(self, client):
        response = client.get(f"{PREFIX}/staff/pending-documents", headers=ADMIN)
        assert response.status_code == 200

    def test_request_id_is_echoed(self, client):
        response = client.get(
            f"{PREFIX}/settings", headers={**STUDENT, "X-Request-ID": "req-42"}
        )
        assert response.headers["X-Request-ID"] == "req-42"


class TestStudentFlow:

    def test_profile(self, client):
        response = client.get(f"{PREFIX}/student/profile", headers=STUDENT)

        assert response.status_code == 200
        body = response.json()
        assert body["student_id"] == "stu-1"
        assert body["document_slots"][0]["status"] == "not_started"
        assert body["fee"]["status"] == "pending"

    def test_unknown_profile_is_404(self, client):
        response = client.get(f"{PREFIX}/student/profile", headers=headers("ghost", "student"))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_upload_submit_verify(self, client):
        created = upload(client)
        assert created.status_code == 201
        document_id = created.json()["id"]

        submitted = client.post(f"{PREFIX}/student/documents/submit", headers=STUDENT)
        assert submitted.json() == {"submitted_count": 1}

        pending = client.get(f"{PREFIX}/staff/pending-documents", headers=STAFF).json()
        assert [p["student_id"] for p in pending] == ["stu-1"]

        verified = client.put(
            f"{PREFIX}/staff/documents/stu-1/{document_id}",
            headers=STAFF,
            json={"decision": "approved"},
        )
        assert verified.status_code == 200
        assert verified.json()["status"] == "approved"

        profile = client.get(f"{PREFIX}/student/profile", headers=STUDENT).json()
        assert profile["progress_percentage"] == 40

    def test_rejection_without_reason_is_422(self, client):
        document_id = upload(client).json()["id"]
        client.post(f"{PREFIX}/student/documents/submit", headers=STUDENT)

        response = client.put(
            f"{PREFIX}/staff/documents/stu-1/{document_id}",
            headers=STAFF,
            json={"decision": "rejected"},
        )
        assert response.status_code == 422

    def test_unknown_type_releases_file(self, client, api_blobs):
        response = upload(client, type_key="passport")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"
        assert len(api_blobs.released) == 1

    def test_submitted_document_cannot_be_deleted(self, client):
        document_id = upload(client).json()["id"]
        client.post(f"{PREFIX}/student/documents/submit", headers=STUDENT)

        response = client.delete(f"{PREFIX}/student/documents/{document_id}", headers=STUDENT)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "invalid_state"

    def test_delete_document(self, client):
        document_id = upload(client).json()["id"]

        response = client.delete(f"{PREFIX}/student/documents/{document_id}", headers=STUDENT)

        assert response.status_code == 204

    def test_classify(self, client, api_classifier):
        api_classifier.guesses["scan.pdf"] = ("Aadhaar Card", 92)

        response = client.post(
            f"{PREFIX}/student/documents/classify",
            headers=STUDENT,
            files=[("files", ("scan.pdf", b"%PDF", "application/pdf"))],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["mapped"] is True
        assert body["results"][0]["outcome"] == "mapped"
        assert body["results"][0]["document_type"] == "Aadhaar Card"

    def test_lms_and_notifications(self, client):
        activated = client.post(f"{PREFIX}/student/lms", headers=STUDENT).json()
        assert activated["lms_activated"] is True

        marked = client.post(f"{PREFIX}/student/notifications/read", headers=STUDENT)
        assert marked.json() == {"marked": 1}


class TestHostel:

    def test_capacity_is_enforced(self, client):
        client.post(f"{PREFIX}/admin/students/stu-2", headers=ADMIN)
        for sid in ("stu-1", "stu-2"):
            response = client.post(
                f"{PREFIX}/student/hostel",
                headers=headers(sid, "student"),
                json={"gender": "Male", "room_type": "single"},
            )
            assert response.json()["status"] == "pending"

        queue = client.get(f"{PREFIX}/staff/hostel/pending", headers=STAFF).json()
        assert {q["student_id"] for q in queue} == {"stu-1", "stu-2"}

        first = client.put(f"{PREFIX}/staff/hostel/stu-1", headers=STAFF, json={"decision": "approved"})
        assert first.json()["status"] == "approved"

        second = client.put(f"{PREFIX}/staff/hostel/stu-2", headers=STAFF, json={"decision": "approved"})
        assert second.status_code == 409
        assert second.json()["error"]["code"] == "capacity_exceeded"

        rooms = client.get(f"{PREFIX}/settings", headers=STUDENT).json()["hostel_rooms"]
        assert rooms == [{"gender": "Male", "room_type": "single", "total": 1, "available": 0}]

    def test_reject_with_reason(self, client):
        client.post(
            f"{PREFIX}/student/hostel", headers=STUDENT,
            json={"gender": "Male", "room_type": "single"},
        )

        response = client.put(
            f"{PREFIX}/staff/hostel/stu-1",
            headers=STAFF,
            json={"decision": "rejected", "reason": "Apply next term"},
        )

        assert response.json()["status"] == "rejected"
        assert response.json()["rejection_reason"] == "Apply next term"


class TestPayments:

    def test_order_and_verify(self, client, api_gateway):
        order = client.post(f"{PREFIX}/payment/orders", headers=STUDENT, json={"amount": "50000"})
        assert order.status_code == 201
        order_id = order.json()["order_id"]
        assert order.json()["amount_minor"] == 5000000

        payload = {
            "order_id": order_id,
            "payment_id": "pay_1",
            "signature": api_gateway.sign(order_id, "pay_1"),
        }
        first = client.post(f"{PREFIX}/payment/verify", headers=STUDENT, json=payload)
        again = client.post(f"{PREFIX}/payment/verify", headers=STUDENT, json=payload)

        assert first.json()["status"] == "paid"
        assert len(again.json()["payments"]) == 1

    def test_bad_signature_is_400(self, client):
        order_id = client.post(
            f"{PREFIX}/payment/orders", headers=STUDENT, json={"amount": "10"}
        ).json()["order_id"]

        response = client.post(
            f"{PREFIX}/payment/verify",
            headers=STUDENT,
            json={"order_id": order_id, "payment_id": "pay_1", "signature": "forged"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_signature"

    def test_non_positive_amount_is_422(self, client):
        response = client.post(f"{PREFIX}/payment/orders", headers=STUDENT, json={"amount": "0"})
        assert response.status_code == 422

    def test_ledger(self, client):
        response = client.get(f"{PREFIX}/payment/ledger", headers=STUDENT)

        assert response.status_code == 200
        assert response.json()["status"] == "pending"
        assert response.json()["payments"] == []


class TestWithoutGateway:

    @pytest.fixture
    def bare_client(self, session_factory, seed_settings, api_blobs):
        seed_settings()
        container = build_container(settings, session_factory, blob_store=api_blobs)
        with TestClient(create_app(container)) as test_client:
            test_client.post(f"{PREFIX}/admin/students/stu-1", headers=ADMIN)
            yield test_client

    def test_ledger_is_readable(self, bare_client):
        response = bare_client.get(f"{PREFIX}/payment/ledger", headers=STUDENT)

        assert response.status_code == 200
        assert Decimal(str(response.json()["balance"])) == Decimal("50000")

    def test_orders_need_the_gateway(self, bare_client):
        response = bare_client.post(f"{PREFIX}/payment/orders", headers=STUDENT, json={"amount": "10"})

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "payment_gateway_error"


class TestAdmin:

    def test_duplicate_student_is_409(self, client):
        response = client.post(f"{PREFIX}/admin/students/stu-1", headers=ADMIN)
        assert response.status_code == 409

    def test_update_required_documents(self, client):
        response = client.put(
            f"{PREFIX}/admin/required-documents",
            headers=ADMIN,
            json=[
                {"type_key": "photo", "display_name": "Photo"},
                {"type_key": "10th_marksheet", "display_name": "10th Marksheet"},
            ],
        )

        assert response.status_code == 200
        profile = client.get(f"{PREFIX}/student/profile", headers=STUDENT).json()
        assert [s["type_key"] for s in profile["document_slots"]] == ["photo", "10th_marksheet"]

    def test_update_hostel_rooms(self, client):
        response = client.put(
            f"{PREFIX}/admin/hostel-rooms",
            headers=ADMIN,
            json=[{"gender": "Female", "room_type": "double", "total": 4}],
        )

        assert response.status_code == 200
        assert response.json() == [
            {"gender": "Female", "room_type": "double", "total": 4, "available": 4}
        ]

    def test_analytics_and_listing(self, client):
        analytics = client.get(f"{PREFIX}/admin/analytics", headers=ADMIN).json()
        assert analytics["total_students"] == 1

        students = client.get(f"{PREFIX}/admin/students", headers=ADMIN).json()
        assert [s["student_id"] for s in students] == ["stu-1"]

    def test_delete_student(self, client):
        response = client.delete(f"{PREFIX}/admin/students/stu-1", headers=ADMIN)
        assert response.status_code == 204

        response = client.get(f"{PREFIX}/student/profile", headers=STUDENT)
        assert response.status_code == 404
