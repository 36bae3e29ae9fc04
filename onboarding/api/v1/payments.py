"""
Fee payment endpoints: open a hosted checkout order and report its result.
"""
from fastapi import APIRouter, Depends, status

from onboarding.api import deps
from onboarding.api.deps import ServiceContainer
from onboarding.schemas.fee import (
    ChargeIntentInfo,
    ChargeIntentRequest,
    FeeLedgerInfo,
    PaymentReconcileRequest,
)
from onboarding.services.common import Principal
from onboarding.services.fee.fee_reconciliation_service import FeeReconciliationService

router = APIRouter(prefix="/payment", tags=["Payments"])


@router.post("/orders", response_model=ChargeIntentInfo, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: ChargeIntentRequest,
    principal: Principal = Depends(deps.get_student),
    service: FeeReconciliationService = Depends(deps.get_fee_service),
):
    return service.create_charge_intent(principal.user_id, payload.amount)


@router.post("/verify", response_model=FeeLedgerInfo)
def verify_payment(
    payload: PaymentReconcileRequest,
    principal: Principal = Depends(deps.get_student),
    service: FeeReconciliationService = Depends(deps.get_fee_service),
):
    return service.reconcile(
        principal.user_id, payload.order_id, payload.payment_id, payload.signature
    )


@router.get("/ledger", response_model=FeeLedgerInfo)
def read_ledger(
    principal: Principal = Depends(deps.get_student),
    container: ServiceContainer = Depends(deps.get_container),
):
    return container.profiles.get_fee_ledger(principal.user_id)
