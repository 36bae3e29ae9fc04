"""
Tests for profile lifecycle, student housekeeping and staff/admin read views.
"""

from decimal import Decimal

import pytest

from onboarding.models.enums import (
    DocumentStatus,
    FeeStatus,
    Gender,
    HostelStatus,
    RoomType,
    VerificationDecision,
)
from onboarding.models.student_profile import DocumentRecord, StudentProfile
from onboarding.services.common import errors


class TestLifecycle:

    def test_new_profile_is_empty(self, profiles):
        snapshot = profiles.create_profile("stu-1")

        assert snapshot.student_id == "stu-1"
        assert snapshot.documents == []
        assert snapshot.fee.total_amount == Decimal("50000")
        assert snapshot.fee.status == FeeStatus.PENDING
        assert snapshot.fee.balance == Decimal("50000")
        assert snapshot.hostel.status == HostelStatus.NOT_APPLIED
        assert snapshot.lms_activated is False
        assert snapshot.progress_percentage == 0
        assert snapshot.version >= 1

    def test_duplicate_profile(self, profiles, student):
        with pytest.raises(errors.ConflictError):
            profiles.create_profile(student)

    def test_missing_profile(self, profiles):
        with pytest.raises(errors.NotFoundError):
            profiles.get_profile("nobody")

    def test_delete_removes_aggregate_and_files(
        self, profiles, documents, student, blob_store, session_factory
    ):
        documents.upload(student, "10th_marksheet", "ref-1", "marks.pdf")

        profiles.delete_profile(student)

        with pytest.raises(errors.NotFoundError):
            profiles.get_profile(student)
        assert blob_store.released == ["ref-1"]
        with session_factory() as session:
            assert session.query(StudentProfile).count() == 0
            assert session.query(DocumentRecord).count() == 0

    def test_every_mutation_bumps_version(self, profiles, documents, student):
        before = profiles.get_profile(student).version

        documents.upload(student, "10th_marksheet", "ref-1", "marks.pdf")

        assert profiles.get_profile(student).version > before


class TestHousekeeping:

    def test_activate_learning_platform(self, profiles, student):
        snapshot = profiles.activate_learning_platform(student)

        assert snapshot.lms_activated is True
        assert snapshot.progress_percentage == 15
        assert len(snapshot.notifications) == 1

    def test_activation_is_idempotent(self, profiles, student):
        first = profiles.activate_learning_platform(student)
        second = profiles.activate_learning_platform(student)

        assert second.version == first.version
        assert len(second.notifications) == 1

    def test_mark_notifications_read(self, profiles, student):
        profiles.activate_learning_platform(student)

        assert profiles.mark_notifications_read(student) == 1
        assert profiles.mark_notifications_read(student) == 0
        assert all(n.read for n in profiles.get_profile(student).notifications)


class TestReadViews:

    @pytest.fixture
    def populated(self, profiles, documents, hostel, staff):
        for sid in ("stu-a", "stu-b", "stu-c"):
            profiles.create_profile(sid)

        approved = documents.upload("stu-a", "10th_marksheet", "ref-a", "a.pdf")
        documents.upload("stu-b", "10th_marksheet", "ref-b", "b.pdf")
        documents.submit_all("stu-a")
        documents.submit_all("stu-b")
        documents.verify(staff, "stu-a", approved.id, VerificationDecision.APPROVED)

        hostel.apply("stu-c", Gender.MALE, RoomType.SINGLE)
        return profiles

    def test_pending_documents(self, populated):
        pending = populated.list_pending_documents()

        assert [p.student_id for p in pending] == ["stu-b"]
        assert pending[0].document.status == DocumentStatus.SUBMITTED

    def test_verification_history(self, populated):
        history = populated.list_verification_history()

        assert [h.student_id for h in history] == ["stu-a"]
        assert history[0].document.verified_by == "staff-1"

    def test_pending_hostel_applications(self, populated):
        pending = populated.list_pending_hostel_applications()

        assert [p.student_id for p in pending] == ["stu-c"]
        assert pending[0].application.room_type == RoomType.SINGLE

    def test_list_profiles(self, populated):
        summaries = {s.student_id: s for s in populated.list_profiles()}

        assert set(summaries) == {"stu-a", "stu-b", "stu-c"}
        assert summaries["stu-a"].documents_approved == 1
        assert summaries["stu-a"].documents_total == 1
        assert summaries["stu-c"].hostel_status == "pending"
        assert summaries["stu-b"].fee_status == "pending"

    def test_analytics(self, populated):
        analytics = populated.analytics()

        assert analytics.total_students == 3
        assert analytics.completed_onboarding == 0
        assert analytics.pending_documents == 1
        assert analytics.fee_pending_count == 3
        assert analytics.pending_hostel_applications == 1
