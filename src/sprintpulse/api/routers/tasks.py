from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sprintpulse.api import schemas
from sprintpulse.api.dependencies import get_db, get_work_item_service
from sprintpulse.api.dependencies_auth import require_current_user
from sprintpulse.api.http_errors import to_http_exception
from sprintpulse.engine.serialization import task_to_dict
from sprintpulse.engine.work_items import WorkItemService
from sprintpulse.storage.models import UserModel


router = APIRouter()


@router.post("")
def create_task(
    task_create: schemas.TaskCreate,
    service: Annotated[WorkItemService, Depends(get_work_item_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Create a task in a team's backlog.
    """
    try:
        task = service.create_task(session, **task_create.model_dump())
    except Exception as e:
        raise to_http_exception(e, "Failed to create task") from e
    return {"data": task_to_dict(task)}


@router.patch("/{task_id}/status")
def update_task_status(
    task_id: str,
    status_update: schemas.TaskStatusUpdate,
    service: Annotated[WorkItemService, Depends(get_work_item_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Move a task to another board column.
    """
    try:
        task = service.update_task_status(session, task_id, status_update.status)
    except Exception as e:
        raise to_http_exception(e, "Failed to update task status") from e
    return {"data": task_to_dict(task)}


@router.patch("/{task_id}")
def update_task(
    task_id: str,
    task_update: schemas.TaskUpdate,
    service: Annotated[WorkItemService, Depends(get_work_item_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Edit a task's fields and optionally move it to another sprint.
    """
    try:
        task = service.update_task(session, task_id, task_update.model_dump(exclude_unset=True))
    except Exception as e:
        raise to_http_exception(e, "Failed to update task") from e
    return {"data": task_to_dict(task)}


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    service: Annotated[WorkItemService, Depends(get_work_item_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Delete a task together with its sprint associations and comments.
    """
    try:
        service.delete_task(session, task_id)
    except Exception as e:
        raise to_http_exception(e, "Failed to delete task") from e
    return {"data": {"id": task_id}}


@router.post("/{task_id}/comments")
def add_comment(
    task_id: str,
    comment_create: schemas.CommentCreate,
    service: Annotated[WorkItemService, Depends(get_work_item_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    try:
        comment = service.add_comment(session, task_id, current_user.id, comment_create.content)
    except Exception as e:
        raise to_http_exception(e, "Failed to add comment") from e
    return {
        "data": {
            "id": comment.id,
            "task_id": comment.task_id,
            "user_id": comment.user_id,
            "content": comment.content,
            "created_at": comment.created_at.isoformat() if comment.created_at else None,
        }
    }
