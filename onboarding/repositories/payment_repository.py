"""Charge intent and payment transaction lookups."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from onboarding.models.student_profile import ChargeIntent, PaymentTransaction
from onboarding.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[PaymentTransaction]):

    def __init__(self, db: Session):
        super().__init__(PaymentTransaction, db)

    def get_by_gateway_payment_id(self, gateway_payment_id: str) -> Optional[PaymentTransaction]:
        stmt = select(PaymentTransaction).where(
            PaymentTransaction.gateway_payment_id == gateway_payment_id
        )
        return self.db.scalars(stmt).one_or_none()

    def get_intent(self, profile_id: str, gateway_order_id: str) -> Optional[ChargeIntent]:
        stmt = select(ChargeIntent).where(
            ChargeIntent.profile_id == profile_id,
            ChargeIntent.gateway_order_id == gateway_order_id,
        )
        return self.db.scalars(stmt).one_or_none()
