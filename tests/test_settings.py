"""
Tests for the settings registry and admin settings updates.
"""

import pytest

from onboarding.config.settings import Settings
from onboarding.models.enums import Gender, RoomType, VerificationDecision
from onboarding.schemas.settings import RequiredDocumentInput
from onboarding.services.common import errors
from onboarding.services.settings.settings_registry import SettingsRegistry


def _definitions(*type_keys):
    return [
        RequiredDocumentInput(type_key=key, display_name=key.title(), description=None)
        for key in type_keys
    ]


class TestSettingsRegistry:

    def test_empty_until_loaded(self, session_factory, seed_settings):
        seed_settings()
        registry = SettingsRegistry(session_factory)

        assert registry.is_loaded is False
        assert registry.required_documents == ()

    def test_load_reads_documents_and_inventory(self, registry):
        assert registry.is_loaded is True
        assert registry.required_type_keys == ("10th_marksheet",)
        assert registry.is_required_type("10th_marksheet")
        assert not registry.is_required_type("passport")

        bucket = registry.bucket(Gender.MALE, RoomType.SINGLE)
        assert (bucket.total, bucket.available) == (1, 1)
        assert registry.bucket(Gender.FEMALE, RoomType.SINGLE) is None

    def test_documents_keep_admin_order(self, session_factory, seed_settings):
        seed_settings(documents=("photo", "10th_marksheet", "transfer_certificate"))

        registry = SettingsRegistry(session_factory).load()

        assert registry.required_type_keys == ("photo", "10th_marksheet", "transfer_certificate")


class TestSettingsService:

    def test_get_settings(self, settings_service):
        snapshot = settings_service.get_settings()

        assert [d.type_key for d in snapshot.required_documents] == ["10th_marksheet"]
        assert snapshot.hostel_rooms[0].gender == Gender.MALE
        assert snapshot.hostel_rooms[0].available == 1

    def test_replace_required_documents(self, settings_service, registry):
        result = settings_service.update_required_documents(
            _definitions("photo", "12th_marksheet")
        )

        assert [d.type_key for d in result] == ["photo", "12th_marksheet"]
        assert registry.required_type_keys == ("photo", "12th_marksheet")

    def test_duplicate_type_keys_rejected(self, settings_service, registry):
        with pytest.raises(errors.ValidationError) as exc_info:
            settings_service.update_required_documents(_definitions("photo", "photo"))

        assert exc_info.value.details["duplicates"] == ["photo"]
        assert registry.required_type_keys == ("10th_marksheet",)

    def test_profiles_are_rescored(self, settings_service, documents, profiles, student, staff):
        record = documents.upload(student, "10th_marksheet", "ref-1", "marks.pdf")
        documents.submit_all(student)
        documents.verify(staff, student, record.id, VerificationDecision.APPROVED)
        assert profiles.get_profile(student).progress_percentage == 40

        settings_service.update_required_documents(_definitions("10th_marksheet", "photo"))
        assert profiles.get_profile(student).progress_percentage == 20

        settings_service.update_required_documents([])
        # Only fee, hostel and learning platform remain, none of them done
        assert profiles.get_profile(student).progress_percentage == 0

    def test_existing_records_survive_list_change(self, settings_service, documents, profiles, student):
        documents.upload(student, "10th_marksheet", "ref-1", "marks.pdf")

        settings_service.update_required_documents(_definitions("photo"))

        snapshot = profiles.get_profile(student)
        assert [d.type_key for d in snapshot.documents] == ["10th_marksheet"]
        assert [s.type_key for s in snapshot.document_slots] == ["photo"]


class TestSettingsConfig:

    def test_cors_origins_by_alias(self):
        config = Settings(BACKEND_CORS_ORIGINS=["http://a", "http://b"])
        assert config.CORS_ORIGINS == ["http://a", "http://b"]

    def test_log_level_is_normalized(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_bad_log_level_rejected(self):
        with pytest.raises(ValueError):
            Settings(LOG_LEVEL="loud")

    def test_threshold_range(self):
        with pytest.raises(ValueError):
            Settings(CLASSIFIER_CONFIDENCE_THRESHOLD=101)

    def test_sqlite_detection(self):
        assert Settings(DATABASE_URL="sqlite:///x.db").is_sqlite()
        assert not Settings(DATABASE_URL="postgresql://u@h/db").is_sqlite()
