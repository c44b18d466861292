from typing import Generic, Optional, Type, TypeVar
from sqlalchemy.orm import Session

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Primary-key lookup and insert for one mapped model using SQLAlchemy Session."""

    model: Type[T]

    def create(self, session: Session, entity: T) -> T:
        session.add(entity)
        # Flush to surface constraint errors, caller commits
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[T]:
        return session.get(self.model, id)
