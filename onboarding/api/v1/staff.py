"""
Staff endpoints: document verification queue and hostel decisions.
"""
from typing import List

from fastapi import APIRouter, Depends

from onboarding.api import deps
from onboarding.api.deps import ServiceContainer
from onboarding.models.enums import HostelDecision
from onboarding.schemas.documents import (
    DocumentRecordInfo,
    DocumentVerificationRequest,
    PendingDocument,
)
from onboarding.schemas.hostel import (
    HostelApplicationInfo,
    HostelDecisionRequest,
    PendingHostelApplication,
)
from onboarding.schemas.profile import StudentProfileSnapshot, StudentProfileSummary
from onboarding.services.common import Principal

router = APIRouter(prefix="/staff", tags=["Staff"])


@router.get("/pending-documents", response_model=List[PendingDocument])
def list_pending_documents(
    principal: Principal = Depends(deps.get_staff),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.list_pending_documents()


@router.get("/verification-history", response_model=List[PendingDocument])
def list_verification_history(
    principal: Principal = Depends(deps.get_staff),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.list_verification_history()


@router.get("/students", response_model=List[StudentProfileSummary])
def list_students(
    principal: Principal = Depends(deps.get_staff),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.list_profiles()


@router.get("/students/{student_id}", response_model=StudentProfileSnapshot)
def read_student(
    student_id: str,
    principal: Principal = Depends(deps.get_staff),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.get_profile(student_id)


@router.put("/documents/{student_id}/{document_id}", response_model=DocumentRecordInfo)
def verify_document(
    student_id: str,
    document_id: str,
    payload: DocumentVerificationRequest,
    principal: Principal = Depends(deps.get_staff),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.documents.verify(
        principal, student_id, document_id, payload.decision, payload.reason
    )


@router.get("/hostel/pending", response_model=List[PendingHostelApplication])
def list_pending_hostel_applications(
    principal: Principal = Depends(deps.get_staff),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.list_pending_hostel_applications()


@router.put("/hostel/{student_id}", response_model=HostelApplicationInfo)
def decide_hostel_application(
    student_id: str,
    payload: HostelDecisionRequest,
    principal: Principal = Depends(deps.get_staff),
    container: ServiceContainer = Depends(deps.get_container),
):
    if payload.decision == HostelDecision.APPROVED:
        return container.hostel.approve(principal, student_id)
    return container.hostel.reject(principal, student_id, payload.reason)
