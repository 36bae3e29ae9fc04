# onboarding/services/settings/settings_service.py
from __future__ import annotations

from typing import Callable, List, Sequence

from sqlalchemy.orm import Session

from onboarding.core.logging import get_logger
from onboarding.repositories import (
    RequiredDocumentRepository,
    RoomInventoryRepository,
    StudentProfileRepository,
)
from onboarding.schemas.settings import (
    RequiredDocumentInfo,
    RequiredDocumentInput,
    RoomInventoryInfo,
    SettingsSnapshot,
)
from onboarding.services.common import UnitOfWork, errors
from onboarding.services.common.mapping import to_schema_list
from onboarding.services.progress.progress_scorer import score_profile
from onboarding.services.settings.settings_registry import SettingsRegistry

logger = get_logger(__name__)


class SettingsService:
    """
    Admin settings: the required-document list and a read view of the
    room inventory. Inventory changes go through the hostel allocation
    service because they interact with approvals.
    """

    def __init__(self, session_factory: Callable[[], Session], registry: SettingsRegistry) -> None:
        self._session_factory = session_factory
        self._registry = registry

    def get_settings(self) -> SettingsSnapshot:
        """Current settings read from the database, not the cached snapshot."""
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            documents = uow.get_repo(RequiredDocumentRepository).list_ordered()
            rooms = uow.get_repo(RoomInventoryRepository).list_entries()
            return SettingsSnapshot(
                required_documents=to_schema_list(documents, RequiredDocumentInfo),
                hostel_rooms=to_schema_list(rooms, RoomInventoryInfo),
            )

    def update_required_documents(
        self, definitions: Sequence[RequiredDocumentInput]
    ) -> List[RequiredDocumentInfo]:
        """
        Replace the required-document list and rescore every profile.

        Changing the list changes what "all documents approved" means, so
        stored progress values are recomputed in the same transaction.
        """
        keys = [d.type_key for d in definitions]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise errors.ValidationError(
                f"Duplicate document type keys: {', '.join(duplicates)}",
                field="type_key",
                details={"duplicates": duplicates},
            )

        with UnitOfWork(self._session_factory) as uow:
            created = uow.get_repo(RequiredDocumentRepository).replace_all(
                [d.model_dump() for d in definitions]
            )
            result = to_schema_list(created, RequiredDocumentInfo)

            profiles = uow.get_repo(StudentProfileRepository)
            rescored = 0
            for profile in profiles.list_profiles():
                progress = score_profile(profile, keys)
                if progress != profile.progress_percentage:
                    profile.progress_percentage = progress
                    profiles.touch(profile)
                    rescored += 1

            uow.commit()

        self._registry.reload()
        logger.info(
            "Required documents updated",
            extra={"count": len(result), "profiles_rescored": rescored},
        )
        return result
