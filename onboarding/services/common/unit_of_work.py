# onboarding/services/common/unit_of_work.py
"""
Unit of Work pattern implementation.

Provides transaction management and repository coordination
for the service layer with SQLAlchemy.
"""
from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from onboarding.repositories.base import BaseRepository

from .errors import ConcurrentModificationError, ServiceError

logger = logging.getLogger(__name__)

TRepository = TypeVar("TRepository", bound=BaseRepository)


class TransactionError(ServiceError):
    """Raised when a database transaction fails."""

    code = "transaction_error"

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message, details={"error_type": type(original_error).__name__})
        self.original_error = original_error


class UnitOfWork(AbstractContextManager["UnitOfWork"]):
    """
    Unit of Work pattern for managing database transactions.

    Coordinates repositories and ensures atomic commits/rollbacks.
    A stale optimistic-lock write on commit or flush is reported as
    ConcurrentModificationError rather than a generic TransactionError.

    Usage:
        >>> with UnitOfWork(session_factory) as uow:
        ...     profiles = uow.get_repo(StudentProfileRepository)
        ...     profile = profiles.get_by_student_id("stu-1")
        ...     profile.lms_activated = True
        ...     uow.commit()

    Callbacks registered with ``after_commit`` run once the transaction
    has been committed; they never run on rollback.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        auto_commit: bool = True,
        auto_flush: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self._auto_commit = auto_commit
        self._auto_flush = auto_flush

        self.session: Optional[Session] = None
        self._committed: bool = False
        self._rolled_back: bool = False
        self._repo_cache: dict[Type[BaseRepository], BaseRepository] = {}
        self._after_commit: list[Callable[[], None]] = []

    # ------------------------------------------------------------------ #
    # Context manager protocol
    # ------------------------------------------------------------------ #

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork context already entered")

        self.session = self._session_factory()
        self.session.autoflush = self._auto_flush
        self._committed = False
        self._rolled_back = False
        self._repo_cache.clear()
        self._after_commit.clear()

        logger.debug("UnitOfWork session started")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        if self.session is None:
            return False

        try:
            if exc_type is None:
                if self._auto_commit and not self._committed and not self._rolled_back:
                    self._commit_session()
            else:
                if not self._rolled_back:
                    self.session.rollback()
                    self._rolled_back = True
                    logger.warning(f"UnitOfWork rolled back due to {exc_type.__name__}")
        finally:
            self.session.close()
            self.session = None
            self._repo_cache.clear()
            logger.debug("UnitOfWork session closed")

        if exc_type is None and self._committed:
            self._run_after_commit()

        return False

    # ------------------------------------------------------------------ #
    # Transaction control
    # ------------------------------------------------------------------ #

    def commit(self) -> None:
        """
        Explicitly commit the current transaction.

        Raises:
            RuntimeError: If called outside of context
            ConcurrentModificationError: If a versioned row was changed meanwhile
            TransactionError: If commit fails
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.commit() called outside of context")

        if self._committed:
            logger.warning("commit() called on already-committed transaction")
            return

        if self._rolled_back:
            raise RuntimeError("Cannot commit a rolled-back transaction")

        self._commit_session()

    def rollback(self) -> None:
        """Explicitly roll back the current transaction."""
        if self.session is None:
            raise RuntimeError("UnitOfWork.rollback() called outside of context")

        if self._rolled_back:
            logger.warning("rollback() called on already-rolled-back transaction")
            return

        try:
            self.session.rollback()
            self._rolled_back = True
            self._committed = False
            self._after_commit.clear()
            logger.debug("UnitOfWork explicitly rolled back")
        except SQLAlchemyError as exc:
            logger.error(f"Rollback failed: {exc}")
            raise TransactionError("Failed to rollback transaction", exc) from exc

    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        if self.session is None:
            raise RuntimeError("UnitOfWork.flush() called outside of context")

        try:
            self.session.flush()
            logger.debug("UnitOfWork flushed")
        except StaleDataError as exc:
            raise ConcurrentModificationError("StudentProfile") from exc
        except SQLAlchemyError as exc:
            logger.error(f"Flush failed: {exc}")
            raise TransactionError("Failed to flush changes", exc) from exc

    def after_commit(self, callback: Callable[[], None]) -> None:
        """Register a side effect to run only once the transaction has committed."""
        self._after_commit.append(callback)

    def _commit_session(self) -> None:
        assert self.session is not None
        try:
            self.session.commit()
            self._committed = True
            logger.debug("UnitOfWork committed")
        except StaleDataError as exc:
            logger.warning(f"Optimistic lock conflict on commit: {exc}")
            self.session.rollback()
            self._rolled_back = True
            raise ConcurrentModificationError("StudentProfile") from exc
        except SQLAlchemyError as exc:
            logger.error(f"Commit failed: {exc}")
            self.session.rollback()
            self._rolled_back = True
            raise TransactionError("Failed to commit transaction", exc) from exc

    def _run_after_commit(self) -> None:
        callbacks, self._after_commit = self._after_commit, []
        for callback in callbacks:
            callback()

    # ------------------------------------------------------------------ #
    # Repository factory
    # ------------------------------------------------------------------ #

    def get_repo(self, repo_cls: Type[TRepository]) -> TRepository:
        """
        Get or create a repository instance bound to this UnitOfWork's session.

        Repositories are cached per UnitOfWork instance for consistency.
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.get_repo() called outside of context")

        if repo_cls in self._repo_cache:
            return self._repo_cache[repo_cls]  # type: ignore

        repo_instance = repo_cls(self.session)
        self._repo_cache[repo_cls] = repo_instance

        logger.debug(f"Created repository: {repo_cls.__name__}")
        return repo_instance  # type: ignore

    # ------------------------------------------------------------------ #
    # Utility properties
    # ------------------------------------------------------------------ #

    @property
    def is_active(self) -> bool:
        return self.session is not None

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back
