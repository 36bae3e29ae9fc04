"""
Room inventory repository.

All writes to ``available`` are single SQL statements evaluated by the
database, so concurrent approvals and capacity edits never lose updates.
"""

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import and_, case, select, update
from sqlalchemy.orm import Session

from onboarding.models.enums import Gender, RoomType
from onboarding.models.settings_registry import RoomInventoryEntry
from onboarding.repositories.base import BaseRepository


Bucket = Tuple[Gender, RoomType]


class RoomInventoryRepository(BaseRepository[RoomInventoryEntry]):

    def __init__(self, db: Session):
        super().__init__(RoomInventoryEntry, db)

    @staticmethod
    def _bucket_clause(gender: Gender, room_type: RoomType):
        return and_(
            RoomInventoryEntry.gender == gender,
            RoomInventoryEntry.room_type == room_type,
        )

    def get_bucket(self, gender: Gender, room_type: RoomType) -> Optional[RoomInventoryEntry]:
        stmt = (
            select(RoomInventoryEntry)
            .where(self._bucket_clause(gender, room_type))
            .execution_options(populate_existing=True)
        )
        return self.db.scalars(stmt).one_or_none()

    def list_entries(self) -> List[RoomInventoryEntry]:
        stmt = (
            select(RoomInventoryEntry)
            .order_by(RoomInventoryEntry.gender, RoomInventoryEntry.room_type)
            .execution_options(populate_existing=True)
        )
        return list(self.db.scalars(stmt))

    def try_reserve(self, gender: Gender, room_type: RoomType) -> bool:
        """
        Atomically take one seat from a bucket.

        Returns False, changing nothing, when the bucket is missing or empty.
        """
        stmt = (
            update(RoomInventoryEntry)
            .where(self._bucket_clause(gender, room_type))
            .where(RoomInventoryEntry.available > 0)
            .values(available=RoomInventoryEntry.available - 1)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def release_one(self, gender: Gender, room_type: RoomType) -> bool:
        """
        Give one seat back to a bucket, never beyond its total.

        Returns False when the bucket is missing or already full.
        """
        stmt = (
            update(RoomInventoryEntry)
            .where(self._bucket_clause(gender, room_type))
            .where(RoomInventoryEntry.available < RoomInventoryEntry.total)
            .values(available=RoomInventoryEntry.available + 1)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def resize(self, gender: Gender, room_type: RoomType, new_total: int) -> bool:
        """
        Set a bucket's total in place.

        Growth by delta adds delta to ``available`` capped at the new total;
        shrinkage keeps ``available`` unless it would exceed the new total.
        Returns False when the bucket does not exist.
        """
        available = RoomInventoryEntry.available
        total = RoomInventoryEntry.total
        grown = available + (new_total - total)

        new_available = case(
            (
                total <= new_total,
                case((grown > new_total, new_total), else_=grown),
            ),
            else_=case((available > new_total, new_total), else_=available),
        )

        stmt = (
            update(RoomInventoryEntry)
            .where(self._bucket_clause(gender, room_type))
            .values(total=new_total, available=new_available)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def add_bucket(self, gender: Gender, room_type: RoomType, total: int) -> RoomInventoryEntry:
        entry = RoomInventoryEntry(
            gender=gender,
            room_type=room_type,
            total=total,
            available=total,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def remove_buckets_except(self, keep: Iterable[Bucket]) -> int:
        keep = set(keep)
        removed = 0
        for entry in self.list_entries():
            if (entry.gender, entry.room_type) not in keep:
                self.db.delete(entry)
                removed += 1
        self.db.flush()
        return removed
