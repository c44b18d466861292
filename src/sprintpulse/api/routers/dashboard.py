from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sprintpulse.api.dependencies import get_dashboard_service, get_db
from sprintpulse.api.dependencies_auth import require_current_user
from sprintpulse.api.http_errors import to_http_exception
from sprintpulse.engine.dashboard_views import DashboardViewService
from sprintpulse.storage.models import UserModel


router = APIRouter()


@router.get("/overview")
def dashboard_overview(
    service: Annotated[DashboardViewService, Depends(get_dashboard_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Headline counts and the most recent sprints of the user's organization.
    """
    try:
        return service.summary(session, current_user.id)
    except Exception as e:
        raise to_http_exception(e, "Failed to load dashboard") from e


@router.get("/teams")
def dashboard_teams(
    service: Annotated[DashboardViewService, Depends(get_dashboard_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    try:
        return service.teams_overview(session, current_user.id)
    except Exception as e:
        raise to_http_exception(e, "Failed to load teams") from e
