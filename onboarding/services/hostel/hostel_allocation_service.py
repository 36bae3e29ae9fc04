# onboarding/services/hostel/hostel_allocation_service.py
"""
Hostel applications and room inventory.

Capacity is rationed at approval time, not at application time: any
number of students may be pending for a bucket, and each approval takes
one seat through a single conditional UPDATE on the inventory row.
"""
from __future__ import annotations

from typing import List, Sequence

from onboarding.models.enums import Gender, HostelStatus, RoomType
from onboarding.repositories import RoomInventoryRepository
from onboarding.schemas.hostel import HostelApplicationInfo
from onboarding.schemas.settings import RoomInventoryInfo, RoomInventoryInput
from onboarding.services.base.base_service import BaseProfileService
from onboarding.services.common import Principal, UnitOfWork, errors
from onboarding.services.common.mapping import to_schema, to_schema_list

APPLICABLE_FROM = (HostelStatus.NOT_APPLIED, HostelStatus.REJECTED)


class HostelAllocationService(BaseProfileService):

    # ------------------------------------------------------------------ #
    # Student
    # ------------------------------------------------------------------ #
    def apply(self, student_id: str, gender: Gender, room_type: RoomType) -> HostelApplicationInfo:
        gender = Gender(gender)
        room_type = RoomType(room_type)

        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)
            hostel = profile.hostel

            if hostel.status not in APPLICABLE_FROM:
                raise errors.InvalidStateError(
                    f"Cannot apply while the application is {hostel.status.value}",
                    current_state=hostel.status.value,
                )

            hostel.gender = gender
            hostel.room_type = room_type
            hostel.status = HostelStatus.PENDING
            hostel.rejection_reason = None
            hostel.decided_by = None

            self._persist(uow, profile)
            result = to_schema(hostel, HostelApplicationInfo)
            uow.commit()

        self._logger.info(
            "Hostel application submitted",
            extra={"student_id": student_id, "gender": gender.value, "room_type": room_type.value},
        )
        return result

    # ------------------------------------------------------------------ #
    # Staff / admin decisions
    # ------------------------------------------------------------------ #
    def approve(self, reviewer: Principal, student_id: str) -> HostelApplicationInfo:
        """
        Take one seat from the applicant's bucket and approve.

        Fails with CapacityExceededError, leaving the application pending
        and the inventory untouched, when the bucket has no seat left.
        """
        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)
            hostel = profile.hostel

            if hostel.status != HostelStatus.PENDING:
                raise errors.InvalidStateError(
                    f"Only pending applications can be approved; this one is {hostel.status.value}",
                    current_state=hostel.status.value,
                )

            inventory = uow.get_repo(RoomInventoryRepository)
            if not inventory.try_reserve(hostel.gender, hostel.room_type):
                if inventory.get_bucket(hostel.gender, hostel.room_type) is None:
                    raise errors.NotFoundError(
                        "RoomInventoryEntry", f"{hostel.gender.value}/{hostel.room_type.value}"
                    )
                self._logger.warning(
                    "Hostel approval rejected: bucket full",
                    extra={
                        "student_id": student_id,
                        "gender": hostel.gender.value,
                        "room_type": hostel.room_type.value,
                    },
                )
                raise errors.CapacityExceededError(hostel.gender.value, hostel.room_type.value)

            hostel.status = HostelStatus.APPROVED
            hostel.rejection_reason = None
            hostel.decided_by = reviewer.user_id
            profile.notify(
                f"Your hostel application ({hostel.gender.value}, {hostel.room_type.value}) "
                "was approved."
            )

            self._persist(uow, profile)
            result = to_schema(hostel, HostelApplicationInfo)
            uow.commit()

        self._logger.info(
            "Hostel application approved",
            extra={"student_id": student_id, "reviewer": reviewer.user_id},
        )
        return result

    def reject(self, reviewer: Principal, student_id: str, reason: str) -> HostelApplicationInfo:
        if not (reason and reason.strip()):
            raise errors.ValidationError("A reason is required when rejecting", field="reason")

        with UnitOfWork(self._session_factory) as uow:
            profile = self._load_profile(uow, student_id)
            hostel = profile.hostel

            if hostel.status != HostelStatus.PENDING:
                raise errors.InvalidStateError(
                    f"Only pending applications can be rejected; this one is {hostel.status.value}",
                    current_state=hostel.status.value,
                )

            hostel.status = HostelStatus.REJECTED
            hostel.rejection_reason = reason.strip()
            hostel.decided_by = reviewer.user_id
            profile.notify(f"Your hostel application was rejected: {hostel.rejection_reason}")

            self._persist(uow, profile)
            result = to_schema(hostel, HostelApplicationInfo)
            uow.commit()

        self._logger.info(
            "Hostel application rejected",
            extra={"student_id": student_id, "reviewer": reviewer.user_id},
        )
        return result

    # ------------------------------------------------------------------ #
    # Admin
    # ------------------------------------------------------------------ #
    def update_inventory(self, entries: Sequence[RoomInventoryInput]) -> List[RoomInventoryInfo]:
        """
        Replace the capacity table.

        Existing buckets are resized in place (see
        ``RoomInventoryRepository.resize``), new buckets start with every
        seat available, and buckets not listed are removed.
        """
        seen = set()
        for entry in entries:
            bucket = (entry.gender, entry.room_type)
            if bucket in seen:
                raise errors.ValidationError(
                    f"Bucket {entry.gender.value}/{entry.room_type.value} is listed twice",
                    field="hostel_rooms",
                )
            seen.add(bucket)

        with UnitOfWork(self._session_factory) as uow:
            inventory = uow.get_repo(RoomInventoryRepository)

            for entry in entries:
                if not inventory.resize(entry.gender, entry.room_type, entry.total):
                    inventory.add_bucket(entry.gender, entry.room_type, entry.total)

            removed = inventory.remove_buckets_except(seen)
            result = to_schema_list(inventory.list_entries(), RoomInventoryInfo)
            uow.commit()

        self._registry.reload()
        self._logger.info(
            "Room inventory updated",
            extra={"buckets": len(result), "removed": removed},
        )
        return result
