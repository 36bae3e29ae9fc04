# onboarding/services/settings/settings_registry.py
"""
Process-wide snapshot of the admin settings.

Loaded once at start-up and reloaded after every admin change. Readers
get immutable tuples, so a reload never mutates data a request is using.
The room counters here are informational; approvals always decrement
the persisted row, never this snapshot.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from sqlalchemy.orm import Session

from onboarding.core.logging import get_logger
from onboarding.models.enums import Gender, RoomType
from onboarding.repositories import RequiredDocumentRepository, RoomInventoryRepository
from onboarding.services.common import UnitOfWork

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequiredDocument:
    type_key: str
    display_name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class RoomBucket:
    gender: Gender
    room_type: RoomType
    total: int
    available: int


class SettingsRegistry:

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self._lock = threading.RLock()
        self._required_documents: Tuple[RequiredDocument, ...] = ()
        self._inventory: Tuple[RoomBucket, ...] = ()
        self._loaded = False

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def load(self) -> "SettingsRegistry":
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            definitions = uow.get_repo(RequiredDocumentRepository).list_ordered()
            entries = uow.get_repo(RoomInventoryRepository).list_entries()

            required = tuple(
                RequiredDocument(d.type_key, d.display_name, d.description)
                for d in definitions
            )
            inventory = tuple(
                RoomBucket(e.gender, e.room_type, e.total, e.available)
                for e in entries
            )

        with self._lock:
            self._required_documents = required
            self._inventory = inventory
            self._loaded = True

        logger.info(
            "Settings registry loaded",
            extra={"required_documents": len(required), "room_buckets": len(inventory)},
        )
        return self

    def reload(self) -> "SettingsRegistry":
        return self.load()

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------ #
    # Readers
    # ------------------------------------------------------------------ #
    @property
    def required_documents(self) -> Tuple[RequiredDocument, ...]:
        with self._lock:
            return self._required_documents

    @property
    def required_type_keys(self) -> Tuple[str, ...]:
        return tuple(d.type_key for d in self.required_documents)

    def is_required_type(self, type_key: str) -> bool:
        return type_key in self.required_type_keys

    @property
    def inventory(self) -> Tuple[RoomBucket, ...]:
        with self._lock:
            return self._inventory

    def bucket(self, gender: Gender, room_type: RoomType) -> Optional[RoomBucket]:
        for entry in self.inventory:
            if entry.gender == gender and entry.room_type == room_type:
                return entry
        return None
