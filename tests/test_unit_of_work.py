"""
Tests for transaction handling in the unit of work.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from onboarding.models.student_profile import StudentProfile
from onboarding.repositories import StudentProfileRepository
from onboarding.services.common import TransactionError, UnitOfWork, errors


class TestUnitOfWork:

    def test_auto_commit_on_clean_exit(self, session_factory, profiles, student):
        with UnitOfWork(session_factory) as uow:
            profile = uow.get_repo(StudentProfileRepository).get_by_student_id(student)
            profile.lms_activated = True

        assert profiles.get_profile(student).lms_activated is True

    def test_rollback_on_exception(self, session_factory, profiles, student):
        with pytest.raises(RuntimeError):
            with UnitOfWork(session_factory) as uow:
                profile = uow.get_repo(StudentProfileRepository).get_by_student_id(student)
                profile.lms_activated = True
                raise RuntimeError("boom")

        assert profiles.get_profile(student).lms_activated is False

    def test_repositories_are_cached_per_unit(self, session_factory):
        with UnitOfWork(session_factory) as uow:
            assert uow.get_repo(StudentProfileRepository) is uow.get_repo(StudentProfileRepository)

    def test_after_commit_callbacks(self, session_factory):
        calls = []

        with UnitOfWork(session_factory) as uow:
            uow.after_commit(lambda: calls.append("released"))
            assert calls == []
            uow.commit()

        assert calls == ["released"]

    def test_after_commit_skipped_on_rollback(self, session_factory):
        calls = []

        with pytest.raises(ValueError):
            with UnitOfWork(session_factory) as uow:
                uow.after_commit(lambda: calls.append("released"))
                raise ValueError("nope")

        with UnitOfWork(session_factory, auto_commit=False) as uow:
            uow.after_commit(lambda: calls.append("released"))
            uow.rollback()

        assert calls == []

    def test_commit_outside_context(self, session_factory):
        with pytest.raises(RuntimeError):
            UnitOfWork(session_factory).commit()

    def test_stale_write_is_concurrent_modification(self, session_factory, student):
        with UnitOfWork(session_factory) as first:
            stale = first.get_repo(StudentProfileRepository).get_by_student_id(student)

            with UnitOfWork(session_factory) as second:
                fresh = second.get_repo(StudentProfileRepository).get_by_student_id(student)
                fresh.lms_activated = True
                second.commit()

            stale.progress_percentage = 15
            with pytest.raises(errors.ConcurrentModificationError):
                first.commit()

    def test_constraint_violation_is_transaction_error(self, session_factory, student):
        with UnitOfWork(session_factory, auto_commit=False) as uow:
            repo = uow.get_repo(StudentProfileRepository)
            repo.add(StudentProfile(student_id=student, lms_activated=False, progress_percentage=0))

            with pytest.raises(TransactionError) as exc_info:
                uow.flush()
            uow.rollback()

        assert isinstance(exc_info.value.original_error, IntegrityError)
