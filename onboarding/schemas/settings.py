"""
Admin settings schemas: required documents and room inventory.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from onboarding.models.enums import Gender, RoomType
from onboarding.schemas.base import BaseCreateSchema, BaseSchema

__all__ = [
    "RequiredDocumentInput",
    "RequiredDocumentInfo",
    "RoomInventoryInput",
    "RoomInventoryInfo",
    "SettingsSnapshot",
]


class RequiredDocumentInput(BaseCreateSchema):
    """One required document as entered by the administrator."""

    display_name: str = Field(..., min_length=1, max_length=255)
    type_key: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)


class RequiredDocumentInfo(BaseSchema):
    display_name: str
    type_key: str
    description: Optional[str] = None


class RoomInventoryInput(BaseCreateSchema):
    """Desired capacity of one (gender, room type) bucket."""

    gender: Gender
    room_type: RoomType
    total: int = Field(..., ge=0, description="Total beds in this bucket")


class RoomInventoryInfo(BaseSchema):
    gender: Gender
    room_type: RoomType
    total: int
    available: int


class SettingsSnapshot(BaseSchema):
    """Current required documents and room inventory."""

    required_documents: List[RequiredDocumentInfo] = Field(default_factory=list)
    hostel_rooms: List[RoomInventoryInfo] = Field(default_factory=list)
