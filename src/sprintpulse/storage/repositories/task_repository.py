from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import delete, select, update, func
import logging

from sprintpulse.storage.models import TaskModel, CommentModel
from .base import BaseRepository

logger = logging.getLogger(__name__)


class TaskRepository(BaseRepository[TaskModel]):
    """Repository for Tasks."""

    model = TaskModel

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[TaskModel]:
        task = self.get(session, id)
        if not task:
            return None
        for key, value in updates.items():
            setattr(task, key, value)
        session.flush()
        return task

    def list_by_team(self, session: Session, team_id: str) -> List[TaskModel]:
        stmt = (
            select(TaskModel)
            .where(TaskModel.team_id == team_id)
            .order_by(TaskModel.created_at.desc())
        )
        return list(session.scalars(stmt).all())

    def list_by_teams(self, session: Session, team_ids: Iterable[str], exclude_status: Optional[str] = None) -> List[TaskModel]:
        stmt = select(TaskModel).where(TaskModel.team_id.in_(list(team_ids)))
        if exclude_status:
            stmt = stmt.where(TaskModel.status != exclude_status)
        return list(session.scalars(stmt).all())

    def ids_in_team(self, session: Session, team_id: str, task_ids: Iterable[str]) -> List[str]:
        """Subset of task_ids that exist and belong to the team."""
        stmt = select(TaskModel.id).where(
            TaskModel.team_id == team_id,
            TaskModel.id.in_(list(task_ids)),
        )
        return list(session.scalars(stmt).all())

    def set_status(self, session: Session, task_ids: Iterable[str], status: str) -> int:
        ids = list(task_ids)
        if not ids:
            return 0
        result = session.execute(
            update(TaskModel).where(TaskModel.id.in_(ids)).values(status=status)
        )
        return result.rowcount

    def count_done_since(self, session: Session, team_id: str, since) -> int:
        stmt = select(func.count(TaskModel.id)).where(
            TaskModel.team_id == team_id,
            TaskModel.status == "done",
            TaskModel.updated_at >= since,
        )
        return session.scalar(stmt) or 0

    def comment_counts(self, session: Session, task_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(task_ids)
        if not ids:
            return {}
        counts: Dict[str, int] = {}
        for task_id in session.scalars(select(CommentModel.task_id).where(CommentModel.task_id.in_(ids))):
            counts[task_id] = counts.get(task_id, 0) + 1
        return counts

    def delete(self, session: Session, task: TaskModel) -> None:
        """Delete a task and its comments; sprint associations are removed by the caller."""
        session.execute(delete(CommentModel).where(CommentModel.task_id == task.id))
        session.delete(task)
        session.flush()
        logger.info(f"Deleted task {task.id}")

    def add_comment(self, session: Session, comment: CommentModel) -> CommentModel:
        session.add(comment)
        session.flush()
        return comment
