# onboarding/api/deps.py
"""
FastAPI dependencies: the service container and the calling principal.

Example usage in a router:
    from fastapi import APIRouter, Depends
    from onboarding.api import deps

    router = APIRouter()

    @router.get("/profile")
    def read_profile(
        principal: Principal = Depends(deps.get_student),
        container: ServiceContainer = Depends(deps.get_container),
    ):
        return container.profiles.get_profile(principal.user_id)
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from onboarding.config.settings import Settings
from onboarding.integrations.blob_store import BlobStore, LocalBlobStore
from onboarding.integrations.document_classifier import DocumentClassifier, HttpDocumentClassifier
from onboarding.integrations.payment_gateway import PaymentGateway, RazorpayGateway
from onboarding.models.enums import UserRole
from onboarding.services.common import Principal, errors
from onboarding.services.common.permissions import require_admin, require_staff, require_student
from onboarding.services.document.classification_ingestion_service import ClassificationIngestionService
from onboarding.services.document.document_lifecycle_service import DocumentLifecycleService
from onboarding.services.fee.fee_reconciliation_service import FeeReconciliationService
from onboarding.services.hostel.hostel_allocation_service import HostelAllocationService
from onboarding.services.profile.profile_service import ProfileService
from onboarding.services.settings.settings_registry import SettingsRegistry
from onboarding.services.settings.settings_service import SettingsService


@dataclass
class ServiceContainer:
    registry: SettingsRegistry
    blob_store: BlobStore
    profiles: ProfileService
    documents: DocumentLifecycleService
    hostel: HostelAllocationService
    settings: SettingsService
    fees: Optional[FeeReconciliationService] = None
    classification: Optional[ClassificationIngestionService] = None


def build_container(
    app_settings: Settings,
    session_factory: Callable[[], Session],
    *,
    blob_store: Optional[BlobStore] = None,
    gateway: Optional[PaymentGateway] = None,
    classifier: Optional[DocumentClassifier] = None,
) -> ServiceContainer:
    """
    Wire services from settings. The payment and classification services
    are left out when their collaborator is not configured.
    """
    registry = SettingsRegistry(session_factory)
    blob_store = blob_store or LocalBlobStore(app_settings.UPLOAD_DIR)

    if gateway is None and app_settings.RAZORPAY_KEY_ID and app_settings.RAZORPAY_KEY_SECRET:
        gateway = RazorpayGateway(app_settings.RAZORPAY_KEY_ID, app_settings.RAZORPAY_KEY_SECRET)

    if classifier is None and app_settings.CLASSIFIER_URL:
        classifier = HttpDocumentClassifier(
            app_settings.CLASSIFIER_URL,
            api_key=app_settings.CLASSIFIER_API_KEY,
            timeout=app_settings.CLASSIFIER_TIMEOUT_SECONDS,
        )

    return ServiceContainer(
        registry=registry,
        blob_store=blob_store,
        profiles=ProfileService(
            session_factory, registry, blob_store,
            fee_total=Decimal(app_settings.FEE_TOTAL_AMOUNT),
        ),
        documents=DocumentLifecycleService(session_factory, registry, blob_store),
        hostel=HostelAllocationService(session_factory, registry),
        settings=SettingsService(session_factory, registry),
        fees=(
            FeeReconciliationService(
                session_factory, registry, gateway, currency=app_settings.CURRENCY
            )
            if gateway is not None else None
        ),
        classification=(
            ClassificationIngestionService(
                session_factory, registry, classifier, blob_store,
                threshold=app_settings.CLASSIFIER_CONFIDENCE_THRESHOLD,
            )
            if classifier is not None else None
        ),
    )


# --- Container & services --------------------------------------------------


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_fee_service(
    container: ServiceContainer = Depends(get_container),
) -> FeeReconciliationService:
    if container.fees is None:
        raise errors.PaymentGatewayError("Payment gateway is not configured")
    return container.fees


def get_classification_service(
    container: ServiceContainer = Depends(get_container),
) -> ClassificationIngestionService:
    if container.classification is None:
        raise errors.ClassifierError("Document classifier is not configured")
    return container.classification


# --- Authentication & Authorization ----------------------------------------


def get_principal(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Principal:
    """
    Identify the caller from headers set by the upstream authenticator.
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity",
        )
    try:
        role = UserRole(x_user_role.lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role {x_user_role!r}",
        )
    return Principal(user_id=x_user_id, role=role)


def get_student(principal: Principal = Depends(get_principal)) -> Principal:
    require_student(principal)
    return principal


def get_staff(principal: Principal = Depends(get_principal)) -> Principal:
    require_staff(principal)
    return principal


def get_admin(principal: Principal = Depends(get_principal)) -> Principal:
    require_admin(principal)
    return principal


__all__ = [
    "ServiceContainer",
    "build_container",
    "get_container",
    "get_fee_service",
    "get_classification_service",
    "get_principal",
    "get_student",
    "get_staff",
    "get_admin",
]
