"""
Student profile aggregate.

One StudentProfile per student account, owning its document records,
fee ledger (with payment transactions and charge intents), hostel
application and notification log. Deleting the profile cascades to
all of them.

The profile row carries an optimistic lock counter (``version``); every
mutation of the aggregate bumps it, so two requests working from the
same snapshot cannot both commit.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onboarding.models.base import BaseModel, TimestampMixin, enum_type, utcnow
from onboarding.models.enums import (
    ChargeIntentStatus,
    DocumentStatus,
    FeeStatus,
    Gender,
    HostelStatus,
    RoomType,
)


class StudentProfile(BaseModel, TimestampMixin):
    """Onboarding state of one student."""

    __tablename__ = "student_profiles"

    student_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        comment="Owning student account id",
    )

    lms_activated: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Derived by the progress scorer; never written directly by callers
    progress_percentage: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    documents: Mapped[List["DocumentRecord"]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="DocumentRecord.created_at",
    )

    fee: Mapped["FeeLedger"] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        uselist=False,
    )

    hostel: Mapped["HostelApplication"] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        uselist=False,
    )

    charge_intents: Mapped[List["ChargeIntent"]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="ChargeIntent.created_at",
    )

    notifications: Mapped[List["ProfileNotification"]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="ProfileNotification.timestamp",
    )

    __mapper_args__ = {"version_id_col": version}

    def find_document(self, document_id: str) -> Optional["DocumentRecord"]:
        for record in self.documents:
            if record.id == document_id:
                return record
        return None

    def find_document_by_type(self, type_key: str) -> Optional["DocumentRecord"]:
        for record in self.documents:
            if record.type_key == type_key:
                return record
        return None

    def notify(self, message: str) -> "ProfileNotification":
        notification = ProfileNotification(message=message, timestamp=utcnow(), read=False)
        self.notifications.append(notification)
        return notification


class DocumentRecord(BaseModel, TimestampMixin):
    """
    One document slot of a profile.

    At most one record exists per (profile, type_key); a rejected record
    is reset in place by the next upload of the same type.
    """

    __tablename__ = "document_records"
    __table_args__ = (
        UniqueConstraint("profile_id", "type_key", name="uq_document_record_slot"),
    )

    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type_key: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Slot identifier; normally a registered required-document key",
    )

    file_ref: Mapped[str] = mapped_column(
        String(1000),
        nullable=False,
        comment="Opaque blob store reference",
    )

    original_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    status: Mapped[DocumentStatus] = mapped_column(
        enum_type(DocumentStatus),
        nullable=False,
        default=DocumentStatus.UPLOADED,
        index=True,
    )

    rejection_reason: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    verified_by: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="Staff account that made the last decision",
    )

    verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    profile: Mapped[StudentProfile] = relationship(back_populates="documents")


class FeeLedger(BaseModel, TimestampMixin):
    """Tuition fee ledger; ``status`` is paid iff the payments cover the total."""

    __tablename__ = "fee_ledgers"

    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )

    status: Mapped[FeeStatus] = mapped_column(
        enum_type(FeeStatus),
        nullable=False,
        default=FeeStatus.PENDING,
    )

    payments: Mapped[List["PaymentTransaction"]] = relationship(
        back_populates="ledger",
        cascade="all, delete-orphan",
        order_by="PaymentTransaction.timestamp",
    )

    profile: Mapped[StudentProfile] = relationship(back_populates="fee")

    @property
    def paid_amount(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), Decimal("0"))

    @property
    def balance(self) -> Decimal:
        return max(self.total_amount - self.paid_amount, Decimal("0"))

    def has_payment(self, gateway_payment_id: str) -> bool:
        return any(p.gateway_payment_id == gateway_payment_id for p in self.payments)

    def recompute_status(self) -> FeeStatus:
        self.status = FeeStatus.PAID if self.paid_amount >= self.total_amount else FeeStatus.PENDING
        return self.status


class PaymentTransaction(BaseModel):
    """A reconciled gateway payment; gateway_payment_id is globally unique."""

    __tablename__ = "payment_transactions"

    ledger_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("fee_ledgers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    gateway_payment_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    gateway_order_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    signature: Mapped[str] = mapped_column(String(128), nullable=False)

    ledger: Mapped[FeeLedger] = relationship(back_populates="payments")


class ChargeIntent(BaseModel, TimestampMixin):
    """
    Gateway order created on behalf of an authenticated student.

    The amount recorded here is the one credited on reconciliation; the
    client callback never supplies an amount.
    """

    __tablename__ = "charge_intents"

    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    gateway_order_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    currency: Mapped[str] = mapped_column(String(8), nullable=False)

    receipt: Mapped[str] = mapped_column(String(64), nullable=False)

    status: Mapped[ChargeIntentStatus] = mapped_column(
        enum_type(ChargeIntentStatus),
        nullable=False,
        default=ChargeIntentStatus.CREATED,
    )

    profile: Mapped[StudentProfile] = relationship(back_populates="charge_intents")


class HostelApplication(BaseModel, TimestampMixin):
    """Hostel seat request; gender and room type are set once the student applies."""

    __tablename__ = "hostel_applications"

    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    gender: Mapped[Gender | None] = mapped_column(
        enum_type(Gender, length=16),
        nullable=True,
    )

    room_type: Mapped[RoomType | None] = mapped_column(
        enum_type(RoomType, length=16),
        nullable=True,
    )

    status: Mapped[HostelStatus] = mapped_column(
        enum_type(HostelStatus),
        nullable=False,
        default=HostelStatus.NOT_APPLIED,
        index=True,
    )

    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    decided_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    profile: Mapped[StudentProfile] = relationship(back_populates="hostel")


class ProfileNotification(BaseModel):
    """Append-only message shown to the student."""

    __tablename__ = "profile_notifications"

    profile_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("student_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    message: Mapped[str] = mapped_column(Text, nullable=False)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    profile: Mapped[StudentProfile] = relationship(back_populates="notifications")
