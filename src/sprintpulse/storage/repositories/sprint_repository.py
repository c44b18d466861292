from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import delete, select
import logging

from sprintpulse.storage.models import SprintModel, SprintTaskModel, TaskModel
from .base import BaseRepository

logger = logging.getLogger(__name__)


class SprintRepository(BaseRepository[SprintModel]):
    """Repository for Sprints and their task associations."""

    model = SprintModel

    # --- Sprints ---

    def list_created_since(self, session: Session, team_ids: Iterable[str], since: datetime) -> List[SprintModel]:
        stmt = (
            select(SprintModel)
            .where(
                SprintModel.team_id.in_(list(team_ids)),
                SprintModel.created_at >= since,
            )
            .order_by(SprintModel.created_at.asc())
        )
        return list(session.scalars(stmt).all())

    def list_by_team(self, session: Session, team_id: str, status: Optional[str] = None) -> List[SprintModel]:
        stmt = select(SprintModel).where(SprintModel.team_id == team_id)
        if status:
            stmt = stmt.where(SprintModel.status == status)
        stmt = stmt.order_by(SprintModel.created_at.desc())
        return list(session.scalars(stmt).all())

    def recent_by_teams(self, session: Session, team_ids: Iterable[str], limit: int = 5) -> List[SprintModel]:
        stmt = (
            select(SprintModel)
            .where(SprintModel.team_id.in_(list(team_ids)))
            .order_by(SprintModel.created_at.desc())
            .limit(limit)
        )
        return list(session.scalars(stmt).all())

    # --- Sprint-Task associations ---

    def add_task(self, session: Session, association: SprintTaskModel) -> SprintTaskModel:
        session.add(association)
        session.flush()
        return association

    def add_tasks(self, session: Session, associations: List[SprintTaskModel]) -> None:
        session.add_all(associations)
        session.flush()

    def remove_task(self, session: Session, task_id: str, sprint_id: Optional[str] = None) -> int:
        """Drop a task's associations, from one sprint or from all of them."""
        stmt = delete(SprintTaskModel).where(SprintTaskModel.task_id == task_id)
        if sprint_id:
            stmt = stmt.where(SprintTaskModel.sprint_id == sprint_id)
        return session.execute(stmt).rowcount

    def tasks_for_sprint(self, session: Session, sprint_id: str) -> List[TaskModel]:
        stmt = (
            select(TaskModel)
            .join(SprintTaskModel, SprintTaskModel.task_id == TaskModel.id)
            .where(SprintTaskModel.sprint_id == sprint_id)
            .order_by(SprintTaskModel.added_at.asc())
        )
        return list(session.scalars(stmt).all())

    def tasks_for_sprints(self, session: Session, sprint_ids: Iterable[str]) -> List[Tuple[str, TaskModel]]:
        """(sprint_id, task) pairs; a task in two sprints appears twice."""
        ids = list(sprint_ids)
        if not ids:
            return []
        stmt = (
            select(SprintTaskModel.sprint_id, TaskModel)
            .join(TaskModel, SprintTaskModel.task_id == TaskModel.id)
            .where(SprintTaskModel.sprint_id.in_(ids))
        )
        return [(row[0], row[1]) for row in session.execute(stmt).all()]

    def associations_for_sprint(self, session: Session, sprint_id: str) -> List[Tuple[SprintTaskModel, TaskModel]]:
        stmt = (
            select(SprintTaskModel, TaskModel)
            .join(TaskModel, SprintTaskModel.task_id == TaskModel.id)
            .where(SprintTaskModel.sprint_id == sprint_id)
            .order_by(SprintTaskModel.added_at.asc())
        )
        return [(row[0], row[1]) for row in session.execute(stmt).all()]

    def task_ids_in_team_sprints(self, session: Session, team_id: str) -> Set[str]:
        stmt = (
            select(SprintTaskModel.task_id)
            .join(SprintModel, SprintTaskModel.sprint_id == SprintModel.id)
            .where(SprintModel.team_id == team_id)
        )
        return set(session.scalars(stmt).all())

    def sprint_for_task(self, session: Session, task_id: str) -> Optional[SprintModel]:
        stmt = (
            select(SprintModel)
            .join(SprintTaskModel, SprintTaskModel.sprint_id == SprintModel.id)
            .where(SprintTaskModel.task_id == task_id)
            .order_by(SprintTaskModel.added_at.desc())
        )
        return session.scalars(stmt).first()
