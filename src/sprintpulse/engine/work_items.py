"""Task and sprint-association mutations."""

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from sprintpulse.errors import NotFoundError, ValidationFailed
from sprintpulse.platform.logging import get_logger
from sprintpulse.storage.models import CommentModel, SprintTaskModel, TaskModel
from sprintpulse.storage.repositories.sprint_repository import SprintRepository
from sprintpulse.storage.repositories.task_repository import TaskRepository

logger = get_logger(__name__)

TASK_STATUSES = ("todo", "in_progress", "review", "done")


class WorkItemService:
    def __init__(self, task_repo: TaskRepository, sprint_repo: SprintRepository):
        self.task_repo = task_repo
        self.sprint_repo = sprint_repo

    def create_task(
        self,
        session: Session,
        team_id: Optional[str],
        title: Optional[str],
        description: Optional[str] = None,
        type: Optional[str] = None,
        priority: Optional[str] = None,
        story_points: Optional[int] = None,
        status: Optional[str] = None,
        assignee_id: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> TaskModel:
        if not team_id or not title:
            raise ValidationFailed("Missing required fields")

        # Empty values fall back to the defaults, as does a zero estimate
        task = TaskModel(
            id=str(uuid.uuid4()),
            team_id=team_id,
            title=title,
            description=description or None,
            type=type or "task",
            priority=priority or "medium",
            story_points=story_points or None,
            status=status or "todo",
            assignee_id=assignee_id or None,
            due_date=due_date,
        )
        self.task_repo.create(session, task)
        logger.info("task_created", task_id=task.id, team_id=team_id)
        return task

    def add_task_to_sprint(self, session: Session, sprint_id: Optional[str], task_id: Optional[str]) -> SprintTaskModel:
        if not sprint_id or not task_id:
            raise ValidationFailed("Missing required fields")

        association = SprintTaskModel(id=str(uuid.uuid4()), sprint_id=sprint_id, task_id=task_id)
        self.sprint_repo.add_task(session, association)
        logger.info("sprint_task_created", sprint_id=sprint_id, task_id=task_id)
        return association

    def update_task_status(self, session: Session, task_id: str, status: Optional[str]) -> TaskModel:
        if status not in TASK_STATUSES:
            raise ValidationFailed(f"Invalid status: {status}", details={"allowed": list(TASK_STATUSES)})

        task = self.task_repo.update(session, task_id, {"status": status})
        if not task:
            raise NotFoundError("Task not found", details={"task_id": task_id})
        return task

    def update_task(
        self,
        session: Session,
        task_id: str,
        updates: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> TaskModel:
        """
        Edit a task from the details form.

        ``updates`` holds only the fields the caller sent. A ``sprint_id``
        key moves the task out of its current sprint and, when not empty,
        into the given one.
        """
        task = self.task_repo.get(session, task_id)
        if not task:
            raise NotFoundError("Task not found", details={"task_id": task_id})

        fields = dict(updates)
        move_to_sprint = "sprint_id" in fields
        target_sprint_id = fields.pop("sprint_id", None) or None

        if "title" in fields:
            fields["title"] = (fields["title"] or "").strip()
            if not fields["title"]:
                raise ValidationFailed("Title is required")
        if "description" in fields:
            fields["description"] = (fields["description"] or "").strip() or None
        if "status" in fields and fields["status"] not in TASK_STATUSES:
            raise ValidationFailed(f"Invalid status: {fields['status']}", details={"allowed": list(TASK_STATUSES)})
        for key in ("type", "priority"):
            if key in fields and not fields[key]:
                del fields[key]
        for key in ("story_points", "assignee_id"):
            if key in fields:
                fields[key] = fields[key] or None
        fields["updated_at"] = now or datetime.now(timezone.utc)

        if move_to_sprint:
            current = self.sprint_repo.sprint_for_task(session, task_id)
            current_sprint_id = current.id if current else None
            if target_sprint_id != current_sprint_id:
                if target_sprint_id and not self.sprint_repo.get(session, target_sprint_id):
                    raise NotFoundError("Sprint not found", details={"sprint_id": target_sprint_id})
                if current_sprint_id:
                    self.sprint_repo.remove_task(session, task_id, sprint_id=current_sprint_id)
                if target_sprint_id:
                    self.sprint_repo.add_task(
                        session,
                        SprintTaskModel(id=str(uuid.uuid4()), sprint_id=target_sprint_id, task_id=task_id),
                    )

        task = self.task_repo.update(session, task_id, fields)
        logger.info("task_updated", task_id=task_id, fields=sorted(fields), sprint_id=target_sprint_id)
        return task

    def delete_task(self, session: Session, task_id: str) -> None:
        task = self.task_repo.get(session, task_id)
        if not task:
            raise NotFoundError("Task not found", details={"task_id": task_id})

        removed = self.sprint_repo.remove_task(session, task_id)
        self.task_repo.delete(session, task)
        logger.info("task_deleted", task_id=task_id, sprint_associations=removed)

    def add_comment(self, session: Session, task_id: str, user_id: str, content: Optional[str]) -> CommentModel:
        content = (content or "").strip()
        if not content:
            raise ValidationFailed("Comment content is required")
        if not self.task_repo.get(session, task_id):
            raise NotFoundError("Task not found", details={"task_id": task_id})

        comment = CommentModel(id=str(uuid.uuid4()), task_id=task_id, user_id=user_id, content=content)
        self.task_repo.add_comment(session, comment)
        logger.info("comment_added", task_id=task_id, user_id=user_id)
        return comment
