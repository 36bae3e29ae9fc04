# onboarding/services/fee/fee_reconciliation_service.py
"""
Tuition fee ledger.

Payments arrive as an unauthenticated client assertion
``(order_id, payment_id, signature)`` after a hosted checkout. The
assertion is only trusted once its HMAC matches; the amount credited is
the one recorded when the authenticated student created the order.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from onboarding.integrations.payment_gateway import PaymentGateway, verify_signature
from onboarding.models.base import utcnow
from onboarding.models.enums import ChargeIntentStatus, FeeStatus
from onboarding.models.student_profile import ChargeIntent, PaymentTransaction
from onboarding.repositories import PaymentRepository
from onboarding.schemas.fee import ChargeIntentInfo, FeeLedgerInfo
from onboarding.services.base.base_service import BaseProfileService
from onboarding.services.common import TransactionError, UnitOfWork, errors
from onboarding.services.common.mapping import ledger_to_schema
from onboarding.services.settings.settings_registry import SettingsRegistry

MINOR_UNITS = Decimal(100)


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * MINOR_UNITS).to_integral_value())


class FeeReconciliationService(BaseProfileService):

    def __init__(
        self,
        session_factory: Callable[[], Session],
        registry: SettingsRegistry,
        gateway: PaymentGateway,
        currency: str = "INR",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(session_factory, registry)
        self._gateway = gateway
        self._currency = currency
        self._clock = clock

    def create_charge_intent(self, student_id: str, amount: Decimal) -> ChargeIntentInfo:
        """Open a hosted order for ``amount`` and remember it for reconciliation."""
        amount = Decimal(amount)
        if amount <= 0:
            raise errors.ValidationError("Amount must be positive", field="amount")

        amount_minor = to_minor_units(amount)
        receipt = f"receipt_order_{int(self._clock().timestamp() * 1000)}"

        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)

            order = self._gateway.create_order(amount_minor, self._currency, receipt)

            intent = ChargeIntent(
                gateway_order_id=order["id"],
                amount=amount,
                currency=self._currency,
                receipt=receipt,
                status=ChargeIntentStatus.CREATED,
            )
            profile.charge_intents.append(intent)
            self._persist(uow, profile)
            uow.commit()

        self._logger.info(
            "Charge intent created",
            extra={"student_id": student_id, "order_id": order["id"], "amount": str(amount)},
        )
        return ChargeIntentInfo(
            order_id=order["id"],
            amount=amount,
            amount_minor=amount_minor,
            currency=self._currency,
            receipt=receipt,
            key_id=getattr(self._gateway, "key_id", None),
        )

    def reconcile(
        self,
        student_id: str,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> FeeLedgerInfo:
        """
        Credit a verified payment to the student's ledger.

        Delivering the same ``payment_id`` again returns the ledger
        unchanged, including when two deliveries race each other.
        """
        if not verify_signature(self._gateway.signing_secret(), order_id, payment_id, signature):
            self._logger.warning(
                "Payment signature mismatch",
                extra={"student_id": student_id, "order_id": order_id, "payment_id": payment_id},
            )
            raise errors.InvalidSignatureError()

        for attempt in range(2):
            try:
                return self._credit(student_id, order_id, payment_id, signature)
            except errors.ConcurrentModificationError:
                # Another request changed the profile first; re-read once and decide again
                if attempt:
                    raise
            except TransactionError as e:
                if not isinstance(e.original_error, IntegrityError):
                    raise
                self._logger.info(
                    "Duplicate payment delivery resolved by constraint",
                    extra={"student_id": student_id, "payment_id": payment_id},
                )
                return self.get_ledger(student_id)
        raise AssertionError("unreachable")

    def get_ledger(self, student_id: str) -> FeeLedgerInfo:
        with UnitOfWork(self._session_factory, auto_commit=False) as uow:
            profile = self._load_profile(uow, student_id)
            return ledger_to_schema(profile.fee)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _credit(
        self, student_id: str, order_id: str, payment_id: str, signature: str
    ) -> FeeLedgerInfo:
        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)
            ledger = profile.fee

            if ledger.has_payment(payment_id):
                self._logger.info(
                    "Payment already reconciled",
                    extra={"student_id": student_id, "payment_id": payment_id},
                )
                return ledger_to_schema(ledger)

            payments = uow.get_repo(PaymentRepository)
            if payments.get_by_gateway_payment_id(payment_id) is not None:
                raise errors.ConflictError(
                    "Payment is already credited to another student",
                    conflicting_field="payment_id",
                )

            intent: Optional[ChargeIntent] = payments.get_intent(profile.id, order_id)
            if intent is None:
                raise errors.NotFoundError("ChargeIntent", order_id)
            if intent.status == ChargeIntentStatus.PAID:
                self._logger.warning(
                    "Second payment reported for a settled order",
                    extra={"student_id": student_id, "order_id": order_id, "payment_id": payment_id},
                )
                raise errors.ConflictError(
                    f"Order {order_id} has already been paid",
                    conflicting_field="order_id",
                )

            ledger.payments.append(PaymentTransaction(
                amount=intent.amount,
                timestamp=self._clock(),
                gateway_payment_id=payment_id,
                gateway_order_id=order_id,
                signature=signature,
            ))
            intent.status = ChargeIntentStatus.PAID
            previous_status = ledger.status
            ledger.recompute_status()

            if ledger.status == FeeStatus.PAID and previous_status != FeeStatus.PAID:
                profile.notify("Your fee payment is complete.")
            else:
                profile.notify(f"Payment of {intent.amount} {intent.currency} received.")

            self._persist(uow, profile)
            result = ledger_to_schema(ledger)
            uow.commit()

        self._logger.info(
            "Payment reconciled",
            extra={
                "student_id": student_id,
                "order_id": order_id,
                "payment_id": payment_id,
                "fee_status": result.status.value,
            },
        )
        return result
