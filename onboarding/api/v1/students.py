"""
Student-facing endpoints: own profile, documents, hostel application,
learning-platform activation and notifications.
"""
from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from onboarding.api import deps
from onboarding.api.deps import ServiceContainer
from onboarding.core.logging import get_logger
from onboarding.schemas.documents import (
    ClassificationBatchResult,
    DocumentRecordInfo,
    SubmitDocumentsResult,
)
from onboarding.schemas.hostel import HostelApplicationInfo, HostelApplyRequest
from onboarding.schemas.profile import StudentProfileSnapshot
from onboarding.services.common import Principal, errors
from onboarding.services.document.classification_ingestion_service import (
    ClassificationIngestionService,
    IncomingFile,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/student", tags=["Student"])


@router.get("/profile", response_model=StudentProfileSnapshot)
def read_profile(
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.get_profile(principal.user_id)


@router.post("/documents", response_model=DocumentRecordInfo, status_code=status.HTTP_201_CREATED)
def upload_document(
    type_key: str = Form(...),
    file: UploadFile = File(...),
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
):
    file_ref = container.blob_store.store(file.filename or "upload", file.file.read())
    try:
        return container.documents.upload(
            principal.user_id, type_key, file_ref, file.filename or file_ref
        )
    except errors.ServiceError:
        logger.info("Upload rejected, releasing stored file", extra={"file_ref": file_ref})
        container.blob_store.release(file_ref)
        raise


@router.post("/documents/submit", response_model=SubmitDocumentsResult)
def submit_documents(
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
):
    count = container.documents.submit_all(principal.user_id)
    return SubmitDocumentsResult(submitted_count=count)


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: str,
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
):
    container.documents.delete(principal.user_id, document_id)


@router.post("/documents/classify", response_model=ClassificationBatchResult)
def classify_documents(
    files: List[UploadFile] = File(...),
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
    service: ClassificationIngestionService = Depends(deps.get_classification_service),
):
    incoming = []
    try:
        for upload in files:
            content = upload.file.read()
            name = upload.filename or "upload"
            incoming.append(IncomingFile(
                file_name=name,
                file_ref=container.blob_store.store(name, content),
                content=content,
                content_type=upload.content_type or "application/octet-stream",
            ))
    except OSError:
        logger.error("Storing classification batch failed", exc_info=True)
        for stored in incoming:
            container.blob_store.release(stored.file_ref)
        raise
    return service.ingest_batch(principal.user_id, incoming)


@router.post("/hostel", response_model=HostelApplicationInfo)
def apply_for_hostel(
    payload: HostelApplyRequest,
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.hostel.apply(principal.user_id, payload.gender, payload.room_type)


@router.post("/lms", response_model=StudentProfileSnapshot)
def activate_learning_platform(
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.activate_learning_platform(principal.user_id)


@router.post("/notifications/read")
def mark_notifications_read(
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
):
    return {"marked": container.profiles.mark_notifications_read(principal.user_id)}
