"""
Tests for document upload, submission, deletion and staff verification.
"""

import pytest

from onboarding.models.enums import DocumentSlotStatus, DocumentStatus, VerificationDecision
from onboarding.services.common import errors


def _upload(documents, student, type_key="10th_marksheet", file_ref="ref-1"):
    return documents.upload(student, type_key, file_ref, f"{type_key}.pdf")


class TestUpload:

    def test_first_upload_creates_record(self, documents, profiles, student):
        record = _upload(documents, student)

        assert record.status == DocumentStatus.UPLOADED
        assert record.type_key == "10th_marksheet"
        assert record.file_ref == "ref-1"

        snapshot = profiles.get_profile(student)
        assert len(snapshot.documents) == 1
        assert snapshot.document_slots[0].status == DocumentSlotStatus.UPLOADED

    def test_missing_slot_reports_not_started(self, profiles, student):
        snapshot = profiles.get_profile(student)

        assert snapshot.documents == []
        assert [s.status for s in snapshot.document_slots] == [DocumentSlotStatus.NOT_STARTED]

    def test_unknown_type_key_is_rejected(self, documents, student):
        with pytest.raises(errors.ValidationError):
            _upload(documents, student, type_key="passport")

    def test_unknown_student(self, documents):
        with pytest.raises(errors.NotFoundError):
            _upload(documents, "nobody")

    def test_reupload_replaces_file_and_releases_old(self, documents, profiles, student, blob_store):
        first = _upload(documents, student, file_ref="ref-1")
        second = _upload(documents, student, file_ref="ref-2")

        assert second.id == first.id
        assert second.file_ref == "ref-2"
        assert blob_store.released == ["ref-1"]
        assert len(profiles.get_profile(student).documents) == 1

    def test_submitted_document_cannot_be_replaced(self, documents, student, blob_store):
        _upload(documents, student)
        documents.submit_all(student)

        with pytest.raises(errors.ConflictError):
            _upload(documents, student, file_ref="ref-2")
        assert blob_store.released == []

    def test_reupload_after_rejection_resets_record(self, documents, student, staff):
        record = _upload(documents, student)
        documents.submit_all(student)
        documents.verify(staff, student, record.id, VerificationDecision.REJECTED, "Blurry scan")

        replaced = _upload(documents, student, file_ref="ref-2")

        assert replaced.id == record.id
        assert replaced.status == DocumentStatus.UPLOADED
        assert replaced.rejection_reason is None
        assert replaced.verified_by is None


class TestSubmit:

    def test_submits_every_uploaded_record(self, documents, profiles, student):
        _upload(documents, student)

        assert documents.submit_all(student) == 1
        snapshot = profiles.get_profile(student)
        assert snapshot.documents[0].status == DocumentStatus.SUBMITTED

    def test_nothing_to_submit(self, documents, student):
        with pytest.raises(errors.InvalidStateError):
            documents.submit_all(student)

    def test_already_submitted_records_are_not_resubmitted(self, documents, student):
        _upload(documents, student)
        documents.submit_all(student)

        with pytest.raises(errors.InvalidStateError):
            documents.submit_all(student)


class TestDelete:

    def test_delete_uploaded_record(self, documents, profiles, student, blob_store):
        record = _upload(documents, student)

        documents.delete(student, record.id)

        assert profiles.get_profile(student).documents == []
        assert blob_store.released == ["ref-1"]

    def test_delete_rejected_record(self, documents, student, staff):
        record = _upload(documents, student)
        documents.submit_all(student)
        documents.verify(staff, student, record.id, VerificationDecision.REJECTED, "Wrong file")

        documents.delete(student, record.id)

    @pytest.mark.parametrize("approve", [False, True])
    def test_locked_records_cannot_be_deleted(self, documents, student, staff, approve):
        record = _upload(documents, student)
        documents.submit_all(student)
        if approve:
            documents.verify(staff, student, record.id, VerificationDecision.APPROVED)

        with pytest.raises(errors.InvalidStateError):
            documents.delete(student, record.id)

    def test_delete_missing_record(self, documents, student):
        with pytest.raises(errors.NotFoundError):
            documents.delete(student, "missing")


class TestVerify:

    def test_approval_scores_documents_and_notifies(self, documents, profiles, student, staff):
        record = _upload(documents, student)
        documents.submit_all(student)

        result = documents.verify(staff, student, record.id, VerificationDecision.APPROVED)

        assert result.status == DocumentStatus.APPROVED
        assert result.verified_by == "staff-1"
        assert result.verified_at is not None

        snapshot = profiles.get_profile(student)
        assert snapshot.progress_percentage == 40
        assert snapshot.notifications[-1].message == "Your document (10th_marksheet) was approved."

    def test_rejection_keeps_reason_and_notifies(self, documents, profiles, student, staff):
        record = _upload(documents, student)
        documents.submit_all(student)

        result = documents.verify(
            staff, student, record.id, VerificationDecision.REJECTED, "  Blurry scan "
        )

        assert result.status == DocumentStatus.REJECTED
        assert result.rejection_reason == "Blurry scan"
        snapshot = profiles.get_profile(student)
        assert snapshot.notifications[-1].message == (
            "Your document (10th_marksheet) was rejected: Blurry scan"
        )
        assert snapshot.document_slots[0].rejection_reason == "Blurry scan"

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_rejection_requires_reason(self, documents, student, staff, reason):
        record = _upload(documents, student)
        documents.submit_all(student)

        with pytest.raises(errors.ValidationError):
            documents.verify(staff, student, record.id, VerificationDecision.REJECTED, reason)

    def test_only_submitted_records_can_be_verified(self, documents, student, staff):
        record = _upload(documents, student)

        with pytest.raises(errors.InvalidStateError):
            documents.verify(staff, student, record.id, VerificationDecision.APPROVED)

    def test_approved_record_cannot_be_verified_again(self, documents, student, staff):
        record = _upload(documents, student)
        documents.submit_all(student)
        documents.verify(staff, student, record.id, VerificationDecision.APPROVED)

        with pytest.raises(errors.InvalidStateError):
            documents.verify(staff, student, record.id, VerificationDecision.REJECTED, "late")

    def test_verify_missing_record(self, documents, student, staff):
        with pytest.raises(errors.NotFoundError):
            documents.verify(staff, student, "missing", VerificationDecision.APPROVED)
