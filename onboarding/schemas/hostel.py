"""
Hostel application schemas.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator

from onboarding.models.enums import Gender, HostelDecision, HostelStatus, RoomType
from onboarding.schemas.base import BaseCreateSchema, BaseSchema

__all__ = [
    "HostelApplyRequest",
    "HostelDecisionRequest",
    "HostelApplicationInfo",
    "PendingHostelApplication",
]


class HostelApplyRequest(BaseCreateSchema):
    gender: Gender
    room_type: RoomType


class HostelDecisionRequest(BaseCreateSchema):
    decision: HostelDecision
    reason: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def reason_required_for_rejection(self) -> "HostelDecisionRequest":
        if self.decision == HostelDecision.REJECTED and not self.reason:
            raise ValueError("A reason is required when rejecting an application")
        return self


class HostelApplicationInfo(BaseSchema):
    gender: Optional[Gender] = None
    room_type: Optional[RoomType] = None
    status: HostelStatus
    rejection_reason: Optional[str] = None


class PendingHostelApplication(BaseSchema):
    student_id: str
    application: HostelApplicationInfo
