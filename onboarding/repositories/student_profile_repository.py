"""
Student profile repository.

Loads the whole onboarding aggregate eagerly so services can reason
about it without lazy loads mid-transaction.
"""

from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from onboarding.models.base import utcnow
from onboarding.models.enums import DocumentStatus, FeeStatus, HostelStatus
from onboarding.models.student_profile import (
    DocumentRecord,
    FeeLedger,
    HostelApplication,
    StudentProfile,
)
from onboarding.repositories.base import BaseRepository


def _aggregate_options():
    return (
        selectinload(StudentProfile.documents),
        selectinload(StudentProfile.fee).selectinload(FeeLedger.payments),
        selectinload(StudentProfile.hostel),
        selectinload(StudentProfile.charge_intents),
        selectinload(StudentProfile.notifications),
    )


class StudentProfileRepository(BaseRepository[StudentProfile]):

    def __init__(self, db: Session):
        super().__init__(StudentProfile, db)

    def get_by_student_id(self, student_id: str) -> Optional[StudentProfile]:
        stmt = (
            select(StudentProfile)
            .where(StudentProfile.student_id == student_id)
            .options(*_aggregate_options())
        )
        return self.db.scalars(stmt).one_or_none()

    def list_profiles(self) -> List[StudentProfile]:
        stmt = (
            select(StudentProfile)
            .options(*_aggregate_options())
            .order_by(StudentProfile.created_at)
        )
        return list(self.db.scalars(stmt))

    def create_for_student(self, student_id: str, fee_total: Decimal) -> StudentProfile:
        """Create an empty profile with a zero-payment ledger and no hostel request."""
        profile = StudentProfile(
            student_id=student_id,
            lms_activated=False,
            progress_percentage=0,
        )
        profile.fee = FeeLedger(total_amount=fee_total, status=FeeStatus.PENDING)
        profile.hostel = HostelApplication(status=HostelStatus.NOT_APPLIED)
        self.db.add(profile)
        self.db.flush()
        return profile

    def touch(self, profile: StudentProfile) -> None:
        """
        Mark the profile row dirty so the flush bumps its version even when
        only child rows changed.
        """
        profile.updated_at = utcnow()

    # ------------------------------------------------------------------ #
    # Staff and admin read side
    # ------------------------------------------------------------------ #

    def list_documents_by_status(
        self, statuses: Sequence[DocumentStatus]
    ) -> List[DocumentRecord]:
        stmt = (
            select(DocumentRecord)
            .where(DocumentRecord.status.in_(list(statuses)))
            .options(selectinload(DocumentRecord.profile))
            .order_by(DocumentRecord.updated_at)
        )
        return list(self.db.scalars(stmt))

    def list_hostel_applications(self, status: HostelStatus) -> List[HostelApplication]:
        stmt = (
            select(HostelApplication)
            .where(HostelApplication.status == status)
            .options(selectinload(HostelApplication.profile))
            .order_by(HostelApplication.updated_at)
        )
        return list(self.db.scalars(stmt))

    def count_completed(self) -> int:
        stmt = select(func.count()).select_from(StudentProfile).where(
            StudentProfile.progress_percentage == 100
        )
        return self.db.scalar(stmt) or 0

    def count_documents(self, status: DocumentStatus) -> int:
        stmt = select(func.count()).select_from(DocumentRecord).where(
            DocumentRecord.status == status
        )
        return self.db.scalar(stmt) or 0

    def count_fee_pending(self) -> int:
        stmt = select(func.count()).select_from(FeeLedger).where(
            FeeLedger.status == FeeStatus.PENDING
        )
        return self.db.scalar(stmt) or 0

    def count_hostel(self, status: HostelStatus) -> int:
        stmt = select(func.count()).select_from(HostelApplication).where(
            HostelApplication.status == status
        )
        return self.db.scalar(stmt) or 0
