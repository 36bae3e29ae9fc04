"""
Pytest configuration and fixtures for the onboarding engine tests.
"""

import os
import tempfile
from decimal import Decimal

import pytest

# Set test environment before importing onboarding modules
_TEST_ROOT = tempfile.mkdtemp(prefix="onboarding-tests-")
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_ROOT, 'app.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["RAZORPAY_KEY_ID"] = ""
os.environ["RAZORPAY_KEY_SECRET"] = ""
os.environ["CLASSIFIER_URL"] = ""

from onboarding.db.init_db import init_db  # noqa: E402
from onboarding.db.session import build_engine, build_session_factory  # noqa: E402
from onboarding.models.enums import Gender, RoomType, UserRole  # noqa: E402
from onboarding.models.settings_registry import (  # noqa: E402
    RequiredDocumentDefinition,
    RoomInventoryEntry,
)
from onboarding.services.common import Principal  # noqa: E402
from onboarding.services.document.classification_ingestion_service import (  # noqa: E402
    ClassificationIngestionService,
)
from onboarding.services.document.document_lifecycle_service import (  # noqa: E402
    DocumentLifecycleService,
)
from onboarding.services.fee.fee_reconciliation_service import (  # noqa: E402
    FeeReconciliationService,
)
from onboarding.services.hostel.hostel_allocation_service import (  # noqa: E402
    HostelAllocationService,
)
from onboarding.services.profile.profile_service import ProfileService  # noqa: E402
from onboarding.services.settings.settings_registry import SettingsRegistry  # noqa: E402
from onboarding.services.settings.settings_service import SettingsService  # noqa: E402

from .fakes import FakeBlobStore, FakeClassifier, FakeGateway  # noqa: E402

FEE_TOTAL = Decimal("50000")


# --- Database ---------------------------------------------------------------


@pytest.fixture
def engine(tmp_path):
    """A fresh file-backed SQLite database per test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'onboarding.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def seed_settings(session_factory):
    """Write required documents and room inventory straight to the database."""

    def _seed(documents=("10th_marksheet",), rooms=((Gender.MALE, RoomType.SINGLE, 1),)):
        with session_factory() as session:
            for position, type_key in enumerate(documents):
                session.add(RequiredDocumentDefinition(
                    type_key=type_key,
                    display_name=type_key.replace("_", " ").title(),
                    position=position,
                ))
            for gender, room_type, total in rooms:
                session.add(RoomInventoryEntry(
                    gender=gender, room_type=room_type, total=total, available=total,
                ))
            session.commit()

    return _seed


@pytest.fixture
def registry(session_factory, seed_settings):
    seed_settings()
    return SettingsRegistry(session_factory).load()


# --- Collaborators ----------------------------------------------------------


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def classifier():
    return FakeClassifier()


# --- Services ---------------------------------------------------------------


@pytest.fixture
def profiles(session_factory, registry, blob_store):
    return ProfileService(session_factory, registry, blob_store, fee_total=FEE_TOTAL)


@pytest.fixture
def documents(session_factory, registry, blob_store):
    return DocumentLifecycleService(session_factory, registry, blob_store)


@pytest.fixture
def hostel(session_factory, registry):
    return HostelAllocationService(session_factory, registry)


@pytest.fixture
def fees(session_factory, registry, gateway):
    return FeeReconciliationService(session_factory, registry, gateway, currency="INR")


@pytest.fixture
def ingestion(session_factory, registry, classifier, blob_store):
    return ClassificationIngestionService(
        session_factory, registry, classifier, blob_store, threshold=70
    )


@pytest.fixture
def settings_service(session_factory, registry):
    return SettingsService(session_factory, registry)


@pytest.fixture
def student(profiles):
    """A freshly created student profile; returns its student ID."""
    profiles.create_profile("stu-1")
    return "stu-1"


@pytest.fixture
def staff():
    return Principal(user_id="staff-1", role=UserRole.STAFF)


@pytest.fixture
def admin():
    return Principal(user_id="admin-1", role=UserRole.ADMIN)
