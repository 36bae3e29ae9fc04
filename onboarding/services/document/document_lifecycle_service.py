# onboarding/services/document/document_lifecycle_service.py
from __future__ import annotations

from onboarding.models.base import utcnow
from onboarding.models.enums import DocumentStatus, VerificationDecision
from onboarding.schemas.documents import DocumentRecordInfo
from onboarding.services.base.base_service import BaseProfileService
from onboarding.services.common import Principal, UnitOfWork, errors
from onboarding.services.common.mapping import to_schema
from onboarding.services.document.slot_rules import apply_upload


class DocumentLifecycleService(BaseProfileService):
    """
    Per-slot verification state of a student's documents.

    Slot lifecycle:
        uploaded -> submitted -> approved | rejected
        rejected -> uploaded (next upload resets the record in place)

    Submitted and approved records are frozen for the student: they
    cannot be replaced or deleted.
    """

    # ------------------------------------------------------------------ #
    # Student operations
    # ------------------------------------------------------------------ #
    def upload(
        self,
        student_id: str,
        type_key: str,
        file_ref: str,
        original_name: str,
    ) -> DocumentRecordInfo:
        """
        Store ``file_ref`` in the ``type_key`` slot.

        Manual uploads must name a type key the administrator configured.
        """
        if not self._registry.is_required_type(type_key):
            raise errors.ValidationError(
                f"Unknown document type '{type_key}'",
                field="type_key",
                details={"allowed": list(self._registry.required_type_keys)},
            )

        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)
            change = apply_upload(profile, type_key, file_ref, original_name)
            self._persist(uow, profile)
            self._release_after_commit(uow, change.released_ref)

            self._logger.info(
                "Document uploaded",
                extra={
                    "student_id": student_id,
                    "document_id": change.record.id,
                    "type_key": type_key,
                    "replaced": not change.created,
                },
            )
            result = to_schema(change.record, DocumentRecordInfo)
            uow.commit()

        return result

    def submit_all(self, student_id: str) -> int:
        """Send every uploaded record for review; returns how many moved."""
        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)

            pending = [d for d in profile.documents if d.status == DocumentStatus.UPLOADED]
            if not pending:
                raise errors.InvalidStateError("There are no uploaded documents to submit")

            for record in pending:
                record.status = DocumentStatus.SUBMITTED

            self._persist(uow, profile)
            uow.commit()

        self._logger.info(
            "Documents submitted",
            extra={"student_id": student_id, "count": len(pending)},
        )
        return len(pending)

    def delete(self, student_id: str, document_id: str) -> None:
        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)

            record = profile.find_document(document_id)
            if record is None:
                raise errors.NotFoundError("DocumentRecord", document_id)

            if record.status in (DocumentStatus.SUBMITTED, DocumentStatus.APPROVED):
                raise errors.InvalidStateError(
                    f"Document is {record.status.value} and can no longer be deleted",
                    current_state=record.status.value,
                )

            profile.documents.remove(record)
            self._persist(uow, profile)
            self._release_after_commit(uow, record.file_ref)
            uow.commit()

        self._logger.info(
            "Document deleted",
            extra={"student_id": student_id, "document_id": document_id},
        )

    # ------------------------------------------------------------------ #
    # Staff operations
    # ------------------------------------------------------------------ #
    def verify(
        self,
        reviewer: Principal,
        student_id: str,
        document_id: str,
        decision: VerificationDecision,
        reason: str | None = None,
    ) -> DocumentRecordInfo:
        """
        Approve or reject a submitted document and notify the student.

        A rejection needs a reason; an approval clears any earlier one.
        """
        if decision == VerificationDecision.REJECTED and not (reason and reason.strip()):
            raise errors.ValidationError("A reason is required when rejecting", field="reason")

        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)

            record = profile.find_document(document_id)
            if record is None:
                raise errors.NotFoundError("DocumentRecord", document_id)

            if record.status != DocumentStatus.SUBMITTED:
                raise errors.InvalidStateError(
                    f"Only submitted documents can be verified; this one is {record.status.value}",
                    current_state=record.status.value,
                )

            record.verified_by = reviewer.user_id
            record.verified_at = utcnow()
            if decision == VerificationDecision.REJECTED:
                record.status = DocumentStatus.REJECTED
                record.rejection_reason = reason.strip()
                profile.notify(
                    f"Your document ({record.type_key}) was rejected: {record.rejection_reason}"
                )
            else:
                record.status = DocumentStatus.APPROVED
                record.rejection_reason = None
                profile.notify(f"Your document ({record.type_key}) was approved.")

            self._persist(uow, profile)
            result = to_schema(record, DocumentRecordInfo)
            uow.commit()

        self._logger.info(
            "Document verified",
            extra={
                "student_id": student_id,
                "document_id": document_id,
                "decision": decision.value,
                "reviewer": reviewer.user_id,
            },
        )
        return result
