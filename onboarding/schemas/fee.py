"""
Fee ledger, charge intent and payment reconciliation schemas.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from onboarding.models.enums import FeeStatus
from onboarding.schemas.base import BaseCreateSchema, BaseSchema

__all__ = [
    "ChargeIntentRequest",
    "ChargeIntentInfo",
    "PaymentReconcileRequest",
    "PaymentTransactionInfo",
    "FeeLedgerInfo",
]


class ChargeIntentRequest(BaseCreateSchema):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class ChargeIntentInfo(BaseSchema):
    """What the client needs to open the hosted checkout."""

    order_id: str
    amount: Decimal
    amount_minor: int = Field(..., description="Amount in the currency's minor unit")
    currency: str
    receipt: str
    key_id: Optional[str] = None


class PaymentReconcileRequest(BaseCreateSchema):
    order_id: str = Field(..., min_length=1, max_length=100)
    payment_id: str = Field(..., min_length=1, max_length=100)
    signature: str = Field(..., min_length=1, max_length=128)


class PaymentTransactionInfo(BaseSchema):
    amount: Decimal
    timestamp: datetime
    gateway_payment_id: str
    gateway_order_id: str


class FeeLedgerInfo(BaseSchema):
    total_amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: FeeStatus
    payments: List[PaymentTransactionInfo] = Field(default_factory=list)
