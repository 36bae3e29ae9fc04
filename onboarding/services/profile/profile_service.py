# onboarding/services/profile/profile_service.py
from __future__ import annotations

from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from onboarding.integrations.blob_store import BlobStore
from onboarding.models.enums import DocumentStatus, HostelStatus
from onboarding.repositories import RoomInventoryRepository
from onboarding.schemas.documents import DocumentRecordInfo, PendingDocument
from onboarding.schemas.fee import FeeLedgerInfo
from onboarding.schemas.hostel import HostelApplicationInfo, PendingHostelApplication
from onboarding.schemas.profile import (
    OnboardingAnalytics,
    StudentProfileSnapshot,
    StudentProfileSummary,
)
from onboarding.services.base.base_service import BaseProfileService
from onboarding.services.common import UnitOfWork, errors
from onboarding.services.common.mapping import (
    ledger_to_schema,
    profile_to_snapshot,
    profile_to_summary,
    to_schema,
)
from onboarding.services.settings.settings_registry import SettingsRegistry

REVIEWED_STATUSES = (DocumentStatus.APPROVED, DocumentStatus.REJECTED)


class ProfileService(BaseProfileService):
    """
    Student profile lifecycle and read-side queries.

    - Create / read / delete the onboarding aggregate
    - Learning-platform activation and notification housekeeping
    - Staff queues and the admin dashboard summary
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        registry: SettingsRegistry,
        blob_store: Optional[BlobStore] = None,
        fee_total: Decimal = Decimal("50000"),
    ) -> None:
        super().__init__(session_factory, registry, blob_store)
        self._fee_total = Decimal(fee_total)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def create_profile(self, student_id: str) -> StudentProfileSnapshot:
        with UnitOfWork(self._session_factory) as uow:
            repo = self._get_profile_repo(uow)
            if repo.get_by_student_id(student_id) is not None:
                raise errors.ConflictError(
                    f"A profile for student {student_id!r} already exists",
                    conflicting_field="student_id",
                )

            profile = repo.create_for_student(student_id, self._fee_total)
            self._persist(uow, profile)
            snapshot = profile_to_snapshot(profile, self._registry.required_documents)
            uow.commit()

        self._logger.info("Student profile created", extra={"student_id": student_id})
        return snapshot

    def get_profile(self, student_id: str) -> StudentProfileSnapshot:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            profile = self._load_profile(uow, student_id)
            return profile_to_snapshot(profile, self._registry.required_documents)

    def delete_profile(self, student_id: str) -> None:
        """
        Remove the profile with everything it owns and release its files.

        An approved hostel seat goes back to its bucket in the same
        transaction.
        """
        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)
            hostel = profile.hostel
            if hostel is not None and hostel.status == HostelStatus.APPROVED:
                inventory = uow.get_repo(RoomInventoryRepository)
                if not inventory.release_one(hostel.gender, hostel.room_type):
                    self._logger.warning(
                        "No seat to give back for deleted profile",
                        extra={
                            "student_id": student_id,
                            "gender": hostel.gender.value,
                            "room_type": hostel.room_type.value,
                        },
                    )
            for record in profile.documents:
                self._release_after_commit(uow, record.file_ref)
            self._get_profile_repo(uow).delete(profile)
            uow.commit()

        self._logger.info("Student profile deleted", extra={"student_id": student_id})

    def get_fee_ledger(self, student_id: str) -> FeeLedgerInfo:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            profile = self._load_profile(uow, student_id)
            return ledger_to_schema(profile.fee)

    # ------------------------------------------------------------------ #
    # Student housekeeping
    # ------------------------------------------------------------------ #
    def activate_learning_platform(self, student_id: str) -> StudentProfileSnapshot:
        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)
            if not profile.lms_activated:
                profile.lms_activated = True
                profile.notify("Your learning platform access is active.")
                self._persist(uow, profile)
                self._logger.info(
                    "Learning platform activated", extra={"student_id": student_id}
                )
            snapshot = profile_to_snapshot(profile, self._registry.required_documents)
            uow.commit()
        return snapshot

    def mark_notifications_read(self, student_id: str) -> int:
        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)
            unread = [n for n in profile.notifications if not n.read]
            for notification in unread:
                notification.read = True
            if unread:
                self._persist(uow, profile)
            uow.commit()
        return len(unread)

    # ------------------------------------------------------------------ #
    # Staff / admin read side
    # ------------------------------------------------------------------ #
    def list_profiles(self) -> List[StudentProfileSummary]:
        required = self._registry.required_type_keys
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            return [
                profile_to_summary(p, required)
                for p in self._get_profile_repo(uow).list_profiles()
            ]

    def list_pending_documents(self) -> List[PendingDocument]:
        return self._documents_with_owner((DocumentStatus.SUBMITTED,))

    def list_verification_history(self) -> List[PendingDocument]:
        return self._documents_with_owner(REVIEWED_STATUSES)

    def list_pending_hostel_applications(self) -> List[PendingHostelApplication]:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            applications = self._get_profile_repo(uow).list_hostel_applications(
                HostelStatus.PENDING
            )
            return [
                PendingHostelApplication(
                    student_id=a.profile.student_id,
                    application=to_schema(a, HostelApplicationInfo),
                )
                for a in applications
            ]

    def analytics(self) -> OnboardingAnalytics:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            repo = self._get_profile_repo(uow)
            return OnboardingAnalytics(
                total_students=repo.count(),
                completed_onboarding=repo.count_completed(),
                pending_documents=repo.count_documents(DocumentStatus.SUBMITTED),
                fee_pending_count=repo.count_fee_pending(),
                pending_hostel_applications=repo.count_hostel(HostelStatus.PENDING),
            )

    def _documents_with_owner(self, statuses) -> List[PendingDocument]:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            records = self._get_profile_repo(uow).list_documents_by_status(statuses)
            return [
                PendingDocument(
                    student_id=r.profile.student_id,
                    document=to_schema(r, DocumentRecordInfo),
                )
                for r in records
            ]
