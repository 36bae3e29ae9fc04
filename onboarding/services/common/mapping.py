# onboarding/services/common/mapping.py
"""
Model-Schema mapping utilities.

Converts ORM objects of the profile aggregate into response schemas.
Conversion happens inside the unit of work, while the aggregate is
still attached to its session.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from onboarding.models.enums import DocumentSlotStatus, DocumentStatus
from onboarding.models.student_profile import FeeLedger, StudentProfile
from onboarding.schemas.documents import DocumentRecordInfo, DocumentSlot
from onboarding.schemas.fee import FeeLedgerInfo, PaymentTransactionInfo
from onboarding.schemas.hostel import HostelApplicationInfo
from onboarding.schemas.profile import (
    NotificationInfo,
    StudentProfileSnapshot,
    StudentProfileSummary,
)
from onboarding.services.settings.settings_registry import RequiredDocument

from .errors import ServiceError

TSchema = TypeVar("TSchema", bound=BaseModel)


class MappingError(ServiceError):
    """Raised when model-to-schema conversion fails."""

    code = "mapping_error"

    def __init__(self, message: str, source_obj: object = None) -> None:
        super().__init__(message, details={"source_type": type(source_obj).__name__})


def to_schema(obj: object, schema_cls: Type[TSchema]) -> TSchema:
    """
    Convert an ORM model to a Pydantic schema.

    Raises:
        MappingError: If obj is None or fails validation
    """
    if obj is None:
        raise MappingError(f"Cannot convert None to {schema_cls.__name__}", source_obj=obj)
    try:
        return schema_cls.model_validate(obj)
    except ValidationError as e:
        raise MappingError(
            f"Failed to convert {type(obj).__name__} to {schema_cls.__name__}: {e}",
            source_obj=obj,
        ) from e


def to_schema_list(objs: Iterable[object], schema_cls: Type[TSchema]) -> List[TSchema]:
    return [to_schema(obj, schema_cls) for obj in objs]


def ledger_to_schema(ledger: FeeLedger) -> FeeLedgerInfo:
    return FeeLedgerInfo(
        total_amount=ledger.total_amount,
        paid_amount=ledger.paid_amount,
        balance=ledger.balance,
        status=ledger.status,
        payments=to_schema_list(ledger.payments, PaymentTransactionInfo),
    )


def document_slots(
    profile: StudentProfile,
    required: Sequence[RequiredDocument],
) -> List[DocumentSlot]:
    """One slot per required document; missing records are ``not_started``."""
    slots = []
    for definition in required:
        record = profile.find_document_by_type(definition.type_key)
        if record is None:
            slots.append(DocumentSlot(
                type_key=definition.type_key,
                display_name=definition.display_name,
                description=definition.description,
                status=DocumentSlotStatus.NOT_STARTED,
            ))
        else:
            slots.append(DocumentSlot(
                type_key=definition.type_key,
                display_name=definition.display_name,
                description=definition.description,
                status=DocumentSlotStatus(record.status.value),
                document_id=record.id,
                rejection_reason=record.rejection_reason,
            ))
    return slots


def profile_to_snapshot(
    profile: StudentProfile,
    required: Sequence[RequiredDocument],
) -> StudentProfileSnapshot:
    return StudentProfileSnapshot(
        student_id=profile.student_id,
        documents=to_schema_list(profile.documents, DocumentRecordInfo),
        document_slots=document_slots(profile, required),
        fee=ledger_to_schema(profile.fee),
        hostel=to_schema(profile.hostel, HostelApplicationInfo),
        lms_activated=profile.lms_activated,
        progress_percentage=profile.progress_percentage,
        notifications=to_schema_list(profile.notifications, NotificationInfo),
        version=profile.version,
    )


def profile_to_summary(
    profile: StudentProfile,
    required_type_keys: Sequence[str],
) -> StudentProfileSummary:
    approved = {
        d.type_key for d in profile.documents
        if d.status == DocumentStatus.APPROVED and d.type_key in required_type_keys
    }
    return StudentProfileSummary(
        student_id=profile.student_id,
        progress_percentage=profile.progress_percentage,
        lms_activated=profile.lms_activated,
        fee_status=profile.fee.status.value,
        hostel_status=profile.hostel.status.value,
        documents_approved=len(approved),
        documents_total=len(required_type_keys),
    )
