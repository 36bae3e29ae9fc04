"""
Base class for services that mutate a student profile.
"""

from typing import Callable, Optional

from sqlalchemy.orm import Session

from onboarding.core.logging import get_logger
from onboarding.integrations.blob_store import BlobStore
from onboarding.models.student_profile import StudentProfile
from onboarding.repositories import StudentProfileRepository
from onboarding.services.common import UnitOfWork, errors
from onboarding.services.progress.progress_scorer import refresh_progress
from onboarding.services.settings.settings_registry import SettingsRegistry


class BaseProfileService:
    """
    Shared behaviour for profile mutations:
    - load the aggregate or fail with NotFoundError
    - recompute progress and bump the profile version before commit
    - release blob references only after the commit succeeded
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        registry: SettingsRegistry,
        blob_store: Optional[BlobStore] = None,
    ) -> None:
        self._session_factory = session_factory
        self._registry = registry
        self._blob_store = blob_store
        self._logger = get_logger(self.__class__.__module__)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _get_profile_repo(self, uow: UnitOfWork) -> StudentProfileRepository:
        return uow.get_repo(StudentProfileRepository)

    def _load_profile(self, uow: UnitOfWork, student_id: str) -> StudentProfile:
        profile = self._get_profile_repo(uow).get_by_student_id(student_id)
        if profile is None:
            raise errors.NotFoundError("StudentProfile", student_id)
        return profile

    def _persist(self, uow: UnitOfWork, profile: StudentProfile) -> None:
        refresh_progress(profile, self._registry.required_type_keys)
        self._get_profile_repo(uow).touch(profile)
        uow.flush()

    def _release_after_commit(self, uow: UnitOfWork, file_ref: Optional[str]) -> None:
        if not file_ref or self._blob_store is None:
            return

        def release() -> None:
            try:
                self._blob_store.release(file_ref)
            except OSError as e:
                # Profile change is committed already; the blob stays orphaned.
                self._logger.warning(
                    f"Could not release blob: {e}", extra={"file_ref": file_ref}
                )

        uow.after_commit(release)
