"""
Base repository with the common CRUD operations.

Repositories never commit; transaction boundaries belong to the
UnitOfWork that created them.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from onboarding.core.logging import get_logger
from onboarding.models.base import BaseModel

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository bound to one model and one session.

    Subclasses fix the model:

        class RoomInventoryRepository(BaseRepository[RoomInventoryEntry]):
            def __init__(self, db: Session):
                super().__init__(RoomInventoryEntry, db)
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def get(self, entity_id: str) -> Optional[ModelType]:
        return self.db.get(self.model, entity_id)

    def list_all(self) -> List[ModelType]:
        return list(self.db.scalars(select(self.model)))

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(self.model)) or 0

    def create(self, data: Dict[str, Any]) -> ModelType:
        entity = self.model(**data)
        self.db.add(entity)
        self.db.flush()
        logger.debug(f"Created {self.model.__name__}", extra={"entity_id": entity.id})
        return entity

    def add(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        return entity

    def delete(self, entity: ModelType) -> None:
        self.db.delete(entity)
        logger.debug(f"Deleted {self.model.__name__}", extra={"entity_id": entity.id})
