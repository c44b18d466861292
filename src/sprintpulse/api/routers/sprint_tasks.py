from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sprintpulse.api import schemas
from sprintpulse.api.dependencies import get_db, get_work_item_service
from sprintpulse.api.dependencies_auth import require_current_user
from sprintpulse.api.http_errors import to_http_exception
from sprintpulse.engine.rounding import as_utc
from sprintpulse.engine.work_items import WorkItemService
from sprintpulse.storage.models import UserModel


router = APIRouter()


@router.post("")
def add_task_to_sprint(
    sprint_task: schemas.SprintTaskCreate,
    service: Annotated[WorkItemService, Depends(get_work_item_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Associate a task with a sprint.
    """
    try:
        association = service.add_task_to_sprint(session, sprint_task.sprint_id, sprint_task.task_id)
    except Exception as e:
        raise to_http_exception(e, "Failed to add task to sprint") from e
    return {
        "data": {
            "id": association.id,
            "sprint_id": association.sprint_id,
            "task_id": association.task_id,
            "added_at": as_utc(association.added_at).isoformat(),
        }
    }
