# onboarding/services/document/slot_rules.py
"""
Replace-or-create rule for a document slot.

Shared by manual uploads and classifier-driven ingestion so both paths
treat an existing record the same way.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from onboarding.models.enums import DocumentStatus
from onboarding.models.student_profile import DocumentRecord, StudentProfile
from onboarding.services.common import errors

LOCKED_STATUSES = (DocumentStatus.SUBMITTED, DocumentStatus.APPROVED)


@dataclass
class SlotChange:
    record: DocumentRecord
    created: bool
    released_ref: Optional[str] = None


def apply_upload(
    profile: StudentProfile,
    type_key: str,
    file_ref: str,
    original_name: str,
) -> SlotChange:
    """
    Put a new file into the ``type_key`` slot of ``profile``.

    An uploaded record has its file replaced; a rejected record is reset
    to uploaded with the new file and its reason cleared. A submitted or
    approved record cannot be touched. The caller releases
    ``released_ref`` once the change is committed.
    """
    record = profile.find_document_by_type(type_key)

    if record is None:
        record = DocumentRecord(
            type_key=type_key,
            file_ref=file_ref,
            original_name=original_name,
            status=DocumentStatus.UPLOADED,
        )
        profile.documents.append(record)
        return SlotChange(record=record, created=True)

    if record.status in LOCKED_STATUSES:
        raise errors.ConflictError(
            f"Document '{type_key}' is {record.status.value} and cannot be replaced",
            conflicting_field="type_key",
            details={"type_key": type_key, "status": record.status.value},
        )

    previous_ref = record.file_ref
    record.file_ref = file_ref
    record.original_name = original_name
    record.status = DocumentStatus.UPLOADED
    record.rejection_reason = None
    record.verified_by = None
    record.verified_at = None

    released = previous_ref if previous_ref != file_ref else None
    return SlotChange(record=record, created=False, released_ref=released)
