"""
Student profile snapshot and reporting schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import Field

from onboarding.schemas.base import BaseSchema
from onboarding.schemas.documents import DocumentRecordInfo, DocumentSlot
from onboarding.schemas.fee import FeeLedgerInfo
from onboarding.schemas.hostel import HostelApplicationInfo

__all__ = [
    "NotificationInfo",
    "StudentProfileSnapshot",
    "StudentProfileSummary",
    "OnboardingAnalytics",
]


class NotificationInfo(BaseSchema):
    message: str
    timestamp: datetime
    read: bool


class StudentProfileSnapshot(BaseSchema):
    """Everything a student, staff member or admin sees about one profile."""

    student_id: str
    documents: List[DocumentRecordInfo] = Field(default_factory=list)
    document_slots: List[DocumentSlot] = Field(default_factory=list)
    fee: FeeLedgerInfo
    hostel: HostelApplicationInfo
    lms_activated: bool
    progress_percentage: int = Field(..., ge=0, le=100)
    notifications: List[NotificationInfo] = Field(default_factory=list)
    version: int


class StudentProfileSummary(BaseSchema):
    student_id: str
    progress_percentage: int
    lms_activated: bool
    fee_status: str
    hostel_status: str
    documents_approved: int
    documents_total: int


class OnboardingAnalytics(BaseSchema):
    total_students: int
    completed_onboarding: int
    pending_documents: int
    fee_pending_count: int
    pending_hostel_applications: int
