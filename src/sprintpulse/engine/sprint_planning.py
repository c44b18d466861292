"""
Sprint Planning

Creates a sprint from a planning session: the sprint row, its task
associations and the status move of the committed tasks.
"""

import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from sprintpulse.errors import ValidationFailed
from sprintpulse.platform.logging import get_logger
from sprintpulse.storage.models import SprintModel, SprintTaskModel
from sprintpulse.storage.repositories.sprint_repository import SprintRepository
from sprintpulse.storage.repositories.task_repository import TaskRepository

logger = get_logger(__name__)


class SprintPlanningService:
    def __init__(self, sprint_repo: SprintRepository, task_repo: TaskRepository):
        self.sprint_repo = sprint_repo
        self.task_repo = task_repo

    def create_sprint(
        self,
        session: Session,
        team_id: Optional[str],
        name: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
        goal: Optional[str] = None,
        task_ids: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a sprint in ``planning`` status and commit tasks to it.

        Task ids that do not exist or belong to another team are skipped and
        reported back; committed tasks move to ``in_progress``.
        """
        if not team_id or not name or not start_date or not end_date:
            raise ValidationFailed("Missing required fields")
        if end_date < start_date:
            raise ValidationFailed("end_date must not be before start_date")

        sprint = SprintModel(
            id=str(uuid.uuid4()),
            team_id=team_id,
            name=name,
            goal=goal,
            start_date=start_date,
            end_date=end_date,
            status="planning",
        )
        self.sprint_repo.create(session, sprint)

        requested = list(dict.fromkeys(task_ids or []))
        valid_ids: List[str] = []
        if requested:
            valid_ids = self.task_repo.ids_in_team(session, team_id, requested)
            if len(valid_ids) != len(requested):
                logger.warning(
                    "sprint_tasks_skipped",
                    sprint_id=sprint.id,
                    requested=len(requested),
                    valid=len(valid_ids),
                )
            self.sprint_repo.add_tasks(
                session,
                [SprintTaskModel(id=str(uuid.uuid4()), sprint_id=sprint.id, task_id=tid) for tid in valid_ids],
            )
            self.task_repo.set_status(session, valid_ids, "in_progress")

        logger.info("sprint_created", sprint_id=sprint.id, team_id=team_id, task_count=len(valid_ids))
        return {
            "sprintId": sprint.id,
            "status": sprint.status,
            "committedTaskIds": valid_ids,
            "skippedTaskIds": [tid for tid in requested if tid not in valid_ids],
        }
