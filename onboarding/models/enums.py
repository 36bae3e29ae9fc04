"""
Database enums shared by models, schemas and services.
"""

import enum


class UserRole(str, enum.Enum):
    """Caller role."""
    STUDENT = "student"
    STAFF = "staff"
    ADMIN = "admin"


class DocumentStatus(str, enum.Enum):
    """Stored state of a document record."""
    UPLOADED = "uploaded"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentSlotStatus(str, enum.Enum):
    """Reported state of a required-document slot (NOT_STARTED is never stored)."""
    NOT_STARTED = "not_started"
    UPLOADED = "uploaded"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class VerificationDecision(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"


class RoomType(str, enum.Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"


class HostelStatus(str, enum.Enum):
    """Hostel application state."""
    NOT_APPLIED = "not_applied"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class HostelDecision(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class FeeStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"


class ChargeIntentStatus(str, enum.Enum):
    CREATED = "created"
    PAID = "paid"


class ClassificationOutcome(str, enum.Enum):
    """Per-file result of a classification batch."""
    MAPPED = "mapped"
    UNMAPPED = "unmapped"
    ERROR = "error"
