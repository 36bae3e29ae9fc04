# onboarding/services/progress/progress_scorer.py
"""
Onboarding progress score.

Four weighted categories: documents 40, fee 30, hostel 15, learning
platform 15. When no documents are required the documents category is
left out of both the earned points and the weight total, so a student
can still reach 100.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from onboarding.models.enums import DocumentStatus, FeeStatus, HostelStatus
from onboarding.models.student_profile import StudentProfile

DOCUMENTS_WEIGHT = Decimal(40)
FEE_WEIGHT = Decimal(30)
HOSTEL_WEIGHT = Decimal(15)
LMS_WEIGHT = Decimal(15)


@dataclass(frozen=True)
class DocumentState:
    type_key: str
    status: DocumentStatus


def compute_progress(
    documents: Iterable[DocumentState],
    fee_status: FeeStatus,
    hostel_status: HostelStatus,
    lms_activated: bool,
    required_type_keys: Sequence[str],
) -> int:
    """Return the completion percentage, always within 0-100."""
    earned = Decimal(0)
    weight_total = Decimal(0)

    required = set(required_type_keys)
    if required:
        approved = {
            d.type_key for d in documents
            if d.status == DocumentStatus.APPROVED and d.type_key in required
        }
        earned += DOCUMENTS_WEIGHT * Decimal(len(approved)) / Decimal(len(required))
        weight_total += DOCUMENTS_WEIGHT

    weight_total += FEE_WEIGHT + HOSTEL_WEIGHT + LMS_WEIGHT
    if fee_status == FeeStatus.PAID:
        earned += FEE_WEIGHT
    if hostel_status != HostelStatus.NOT_APPLIED:
        earned += HOSTEL_WEIGHT
    if lms_activated:
        earned += LMS_WEIGHT

    percentage = (Decimal(100) * earned / weight_total).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    return max(0, min(100, int(percentage)))


def score_profile(profile: StudentProfile, required_type_keys: Sequence[str]) -> int:
    return compute_progress(
        (DocumentState(d.type_key, d.status) for d in profile.documents),
        profile.fee.status,
        profile.hostel.status,
        profile.lms_activated,
        required_type_keys,
    )


def refresh_progress(profile: StudentProfile, required_type_keys: Sequence[str]) -> int:
    """Recompute and store ``progress_percentage`` on the profile."""
    profile.progress_percentage = score_profile(profile, required_type_keys)
    return profile.progress_percentage
