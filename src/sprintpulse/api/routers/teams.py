from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sprintpulse.api.dependencies import get_dashboard_service, get_db
from sprintpulse.api.dependencies_auth import require_current_user
from sprintpulse.api.http_errors import to_http_exception
from sprintpulse.engine.dashboard_views import DashboardViewService
from sprintpulse.storage.models import UserModel


router = APIRouter()


@router.get("/{team_id}/members")
def team_members(
    team_id: str,
    service: Annotated[DashboardViewService, Depends(get_dashboard_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    try:
        return service.team_members(session, team_id)
    except Exception as e:
        raise to_http_exception(e, "Failed to load team members") from e


@router.get("/{team_id}/backlog")
def team_backlog(
    team_id: str,
    service: Annotated[DashboardViewService, Depends(get_dashboard_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Tasks of the team that are not in any of its sprints.
    """
    try:
        return service.backlog(session, team_id)
    except Exception as e:
        raise to_http_exception(e, "Failed to load backlog") from e


@router.get("/{team_id}/kanban")
def team_kanban(
    team_id: str,
    service: Annotated[DashboardViewService, Depends(get_dashboard_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
    sprint: Annotated[str, Query(description="all, backlog or a sprint id")] = "all",
):
    try:
        return service.kanban(session, team_id, sprint_filter=sprint)
    except Exception as e:
        raise to_http_exception(e, "Failed to load kanban board") from e


@router.get("/{team_id}/epics-labels")
def team_epics_and_labels(
    team_id: str,
    service: Annotated[DashboardViewService, Depends(get_dashboard_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    try:
        return service.epics_and_labels(session, team_id)
    except Exception as e:
        raise to_http_exception(e, "Failed to load epics and labels") from e
