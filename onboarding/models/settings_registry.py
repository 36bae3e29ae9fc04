"""
Admin-owned configuration tables.

Required document definitions and the hostel room inventory. There is a
single institution, so these tables are global rather than per tenant.
"""

from sqlalchemy import CheckConstraint, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from onboarding.models.base import BaseModel, TimestampMixin, enum_type
from onboarding.models.enums import Gender, RoomType


class RequiredDocumentDefinition(BaseModel, TimestampMixin):
    """A document every student must have approved."""

    __tablename__ = "required_document_definitions"

    type_key: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Slot identifier, e.g. 10th_marksheet",
    )

    display_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    # Display order on the admin screen
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )


class RoomInventoryEntry(BaseModel, TimestampMixin):
    """
    Capacity of one (gender, room type) bucket.

    ``available`` is the shared counter decremented by hostel approvals;
    the database enforces ``0 <= available <= total``.
    """

    __tablename__ = "room_inventory_entries"
    __table_args__ = (
        UniqueConstraint("gender", "room_type", name="uq_room_inventory_bucket"),
        CheckConstraint("total >= 0", name="ck_room_inventory_total_non_negative"),
        CheckConstraint("available >= 0", name="ck_room_inventory_available_non_negative"),
        CheckConstraint("available <= total", name="ck_room_inventory_available_le_total"),
    )

    gender: Mapped[Gender] = mapped_column(
        enum_type(Gender, length=16),
        nullable=False,
    )

    room_type: Mapped[RoomType] = mapped_column(
        enum_type(RoomType, length=16),
        nullable=False,
    )

    total: Mapped[int] = mapped_column(Integer, nullable=False)

    available: Mapped[int] = mapped_column(Integer, nullable=False)
