from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
import logging

from sprintpulse.errors import RetrospectiveExistsError
from sprintpulse.storage.models import RetrospectiveModel
from .base import BaseRepository

logger = logging.getLogger(__name__)


class RetrospectiveRepository(BaseRepository[RetrospectiveModel]):
    model = RetrospectiveModel

    def create(self, session: Session, entity: RetrospectiveModel) -> RetrospectiveModel:
        """
        Insert a retrospective, relying on the unique sprint_id constraint.

        Raises:
            RetrospectiveExistsError: another row for the sprint won the insert
        """
        session.add(entity)
        try:
            session.flush()
        except IntegrityError:
            session.rollback()
            logger.warning(f"Retrospective insert lost for sprint {entity.sprint_id}")
            raise RetrospectiveExistsError(entity.sprint_id)
        return entity

    def get_by_sprint(self, session: Session, sprint_id: str) -> Optional[RetrospectiveModel]:
        stmt = select(RetrospectiveModel).where(RetrospectiveModel.sprint_id == sprint_id)
        return session.scalars(stmt).first()
