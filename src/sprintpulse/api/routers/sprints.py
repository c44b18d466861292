from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sprintpulse.api import schemas
from sprintpulse.api.dependencies import (
    get_db,
    get_retrospective_repository,
    get_sprint_repository,
    get_sprint_planning_service,
)
from sprintpulse.api.dependencies_auth import require_current_user
from sprintpulse.api.http_errors import to_http_exception
from sprintpulse.engine.rounding import as_utc
from sprintpulse.engine.sprint_planning import SprintPlanningService
from sprintpulse.storage.models import UserModel
from sprintpulse.storage.repositories.retrospective_repository import RetrospectiveRepository
from sprintpulse.storage.repositories.sprint_repository import SprintRepository


router = APIRouter()


@router.post("")
def create_sprint(
    sprint_create: schemas.SprintCreate,
    service: Annotated[SprintPlanningService, Depends(get_sprint_planning_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Create a sprint from a planning session and commit its tasks.
    """
    try:
        return service.create_sprint(session, **sprint_create.model_dump())
    except Exception as e:
        raise to_http_exception(e, "Failed to create sprint") from e


@router.get("/{sprint_id}/retrospectives")
def list_retrospectives(
    sprint_id: str,
    repo: Annotated[RetrospectiveRepository, Depends(get_retrospective_repository)],
    sprint_repo: Annotated[SprintRepository, Depends(get_sprint_repository)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Stored retrospectives of a sprint (at most one).
    """
    if not sprint_repo.get(session, sprint_id):
        raise HTTPException(status_code=404, detail="Sprint not found")

    retrospective = repo.get_by_sprint(session, sprint_id)
    if not retrospective:
        return []
    return [{
        "id": retrospective.id,
        "sprintId": retrospective.sprint_id,
        "content": retrospective.content,
        "createdBy": retrospective.created_by,
        "createdAt": as_utc(retrospective.created_at).isoformat(),
    }]
