"""
Admin endpoints: student provisioning, dashboard and onboarding settings.
"""
from typing import List

from fastapi import APIRouter, Depends, status

from onboarding.api import deps
from onboarding.api.deps import ServiceContainer
from onboarding.schemas.profile import (
    OnboardingAnalytics,
    StudentProfileSnapshot,
    StudentProfileSummary,
)
from onboarding.schemas.settings import (
    RequiredDocumentInfo,
    RequiredDocumentInput,
    RoomInventoryInfo,
    RoomInventoryInput,
)
from onboarding.services.common import Principal

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/students", response_model=List[StudentProfileSummary])
def list_students(
    principal: Principal = Depends(deps.get_admin),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.list_profiles()


@router.post(
    "/students/{student_id}",
    response_model=StudentProfileSnapshot,
    status_code=status.HTTP_201_CREATED,
)
def create_student(
    student_id: str,
    principal: Principal = Depends(deps.get_admin),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.create_profile(student_id)


@router.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: str,
    principal: Principal = Depends(deps.get_admin),
    container: ServiceContainer = Depends(deps.get_container),
):
    container.profiles.delete_profile(student_id)


@router.get("/analytics", response_model=OnboardingAnalytics)
def read_analytics(
    principal: Principal = Depends(deps.get_admin),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.analytics()


@router.put("/required-documents", response_model=List[RequiredDocumentInfo])
def update_required_documents(
    payload: List[RequiredDocumentInput],
    principal: Principal = Depends(deps.get_admin),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.settings.update_required_documents(payload)


@router.put("/hostel-rooms", response_model=List[RoomInventoryInfo])
def update_hostel_rooms(
    payload: List[RoomInventoryInput],
    principal: Principal = Depends(deps.get_admin),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.hostel.update_inventory(payload)
