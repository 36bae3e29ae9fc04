"""
Document record, slot and verification schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from onboarding.models.enums import (
    ClassificationOutcome,
    DocumentSlotStatus,
    DocumentStatus,
    VerificationDecision,
)
from onboarding.schemas.base import BaseCreateSchema, BaseResponseSchema, BaseSchema

__all__ = [
    "DocumentRecordInfo",
    "DocumentSlot",
    "DocumentVerificationRequest",
    "SubmitDocumentsResult",
    "PendingDocument",
    "ClassificationFileResult",
    "ClassificationBatchResult",
]


class DocumentRecordInfo(BaseResponseSchema):
    type_key: str
    file_ref: str
    original_name: str
    status: DocumentStatus
    rejection_reason: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None


class DocumentSlot(BaseSchema):
    """
    Reported state of one required document.

    Slots with no record are reported as ``not_started``.
    """

    type_key: str
    display_name: str
    description: Optional[str] = None
    status: DocumentSlotStatus
    document_id: Optional[str] = None
    rejection_reason: Optional[str] = None


class DocumentVerificationRequest(BaseCreateSchema):
    decision: VerificationDecision
    reason: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def reason_required_for_rejection(self) -> "DocumentVerificationRequest":
        if self.decision == VerificationDecision.REJECTED and not self.reason:
            raise ValueError("A reason is required when rejecting a document")
        return self


class SubmitDocumentsResult(BaseSchema):
    submitted_count: int


class PendingDocument(BaseSchema):
    """A document record together with its owner, for staff queues."""

    student_id: str
    document: DocumentRecordInfo


class ClassificationFileResult(BaseSchema):
    file_name: str
    outcome: ClassificationOutcome
    document_type: Optional[str] = None
    confidence: Optional[float] = None
    file_ref: Optional[str] = None
    message: str


class ClassificationBatchResult(BaseSchema):
    results: List[ClassificationFileResult] = Field(default_factory=list)
    mapped: bool = False

    @property
    def summary(self) -> str:
        return "\n".join(f"{r.file_name}: {r.message}" for r in self.results)
