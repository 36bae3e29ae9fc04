from onboarding.models.base import Base, BaseModel, TimestampMixin
from onboarding.models.settings_registry import RequiredDocumentDefinition, RoomInventoryEntry
from onboarding.models.student_profile import (
    ChargeIntent,
    DocumentRecord,
    FeeLedger,
    HostelApplication,
    PaymentTransaction,
    ProfileNotification,
    StudentProfile,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "RequiredDocumentDefinition",
    "RoomInventoryEntry",
    "StudentProfile",
    "DocumentRecord",
    "FeeLedger",
    "PaymentTransaction",
    "ChargeIntent",
    "HostelApplication",
    "ProfileNotification",
]
