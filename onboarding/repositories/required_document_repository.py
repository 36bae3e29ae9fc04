"""Required document definitions repository."""

from typing import List, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from onboarding.models.settings_registry import RequiredDocumentDefinition
from onboarding.repositories.base import BaseRepository


class RequiredDocumentRepository(BaseRepository[RequiredDocumentDefinition]):

    def __init__(self, db: Session):
        super().__init__(RequiredDocumentDefinition, db)

    def list_ordered(self) -> List[RequiredDocumentDefinition]:
        stmt = select(RequiredDocumentDefinition).order_by(
            RequiredDocumentDefinition.position,
            RequiredDocumentDefinition.type_key,
        )
        return list(self.db.scalars(stmt))

    def replace_all(self, definitions: Sequence[dict]) -> List[RequiredDocumentDefinition]:
        """Replace the whole list; ``definitions`` are already validated."""
        self.db.execute(
            delete(RequiredDocumentDefinition).execution_options(synchronize_session=False)
        )
        created = []
        for position, data in enumerate(definitions):
            entry = RequiredDocumentDefinition(position=position, **data)
            self.db.add(entry)
            created.append(entry)
        self.db.flush()
        return created
