"""Plain-dict views of stored rows, used for prompts and dashboard payloads."""

from typing import Any, Dict, Optional

from sprintpulse.storage.models import SprintModel, TaskModel


def initials(full_name: Optional[str]) -> str:
    if not full_name:
        return "U"
    return "".join(part[0] for part in full_name.split(" ") if part).upper()


def task_to_dict(task: TaskModel) -> Dict[str, Any]:
    return {
        "id": task.id,
        "team_id": task.team_id,
        "title": task.title,
        "description": task.description,
        "type": task.type,
        "status": task.status,
        "priority": task.priority,
        "story_points": task.story_points,
        "assignee_id": task.assignee_id,
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "created_at": task.created_at.isoformat() if task.created_at else None,
        "updated_at": task.updated_at.isoformat() if task.updated_at else None,
    }


def sprint_to_dict(sprint: SprintModel) -> Dict[str, Any]:
    return {
        "id": sprint.id,
        "team_id": sprint.team_id,
        "name": sprint.name,
        "goal": sprint.goal,
        "start_date": sprint.start_date.isoformat(),
        "end_date": sprint.end_date.isoformat(),
        "status": sprint.status,
        "created_at": sprint.created_at.isoformat() if sprint.created_at else None,
    }
