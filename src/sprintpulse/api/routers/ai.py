"""
Analytics and generative analysis endpoints.

Deterministic analytics (performance metrics, predictive analytics) are
computed from the store; the rest go through the generative client.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sprintpulse.api import schemas
from sprintpulse.api.dependencies import (
    get_analysis_service,
    get_db,
    get_performance_metrics_service,
    get_predictive_analytics_service,
)
from sprintpulse.api.dependencies_auth import require_current_user
from sprintpulse.api.http_errors import to_http_exception
from sprintpulse.engine.analysis_service import AIAnalysisService
from sprintpulse.engine.performance_metrics import PerformanceMetricsService
from sprintpulse.engine.predictive_analytics import PredictiveAnalyticsService
from sprintpulse.errors import ValidationFailed
from sprintpulse.platform.config import settings
from sprintpulse.storage.models import UserModel


router = APIRouter()


@router.post("/performance-metrics")
def performance_metrics(
    request: schemas.PerformanceMetricsRequest,
    service: Annotated[PerformanceMetricsService, Depends(get_performance_metrics_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Sprint velocity, member productivity and quality metrics over a window.
    """
    time_range = request.time_range
    if time_range is None:
        time_range = settings.PERFORMANCE_DEFAULT_TIME_RANGE_DAYS
    try:
        return service.generate(session, request.team_ids, time_range=time_range)
    except Exception as e:
        raise to_http_exception(e, "Failed to generate performance metrics") from e


@router.post("/predictive-analytics")
def predictive_analytics(
    request: schemas.PredictiveAnalyticsRequest,
    service: Annotated[PredictiveAnalyticsService, Depends(get_predictive_analytics_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Completion forecast and burndown projection for one sprint.
    """
    try:
        return service.analyze(session, request.sprint_id, request.team_ids)
    except Exception as e:
        raise to_http_exception(e, "Failed to generate predictive analytics") from e


@router.post("/retrospective")
def generate_retrospective(
    request: schemas.RetrospectiveRequest,
    service: Annotated[AIAnalysisService, Depends(get_analysis_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Generate and store the markdown retrospective of a sprint.

    A sprint has at most one; a second request answers 409.
    """
    try:
        if not request.sprint_id:
            raise ValidationFailed("Sprint ID is required")
        return service.generate_retrospective(session, request.sprint_id, created_by=current_user.id)
    except Exception as e:
        raise to_http_exception(e, "Failed to generate retrospective") from e


@router.post("/risk-heatmap")
def risk_heatmap(
    request: schemas.RiskHeatmapRequest,
    service: Annotated[AIAnalysisService, Depends(get_analysis_service)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    current_date = request.current_date or date.today().isoformat()
    try:
        return service.risk_heatmap(request.tasks, request.team_members, current_date)
    except Exception as e:
        raise to_http_exception(e, "Failed to generate risk analysis") from e


@router.post("/scope-check")
def scope_check(
    request: schemas.ScopeCheckRequest,
    service: Annotated[AIAnalysisService, Depends(get_analysis_service)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    try:
        return service.scope_check(
            request.original_tasks,
            request.current_tasks,
            request.sprint_start_date,
            request.sprint_name,
        )
    except Exception as e:
        raise to_http_exception(e, "Failed to analyze scope creep") from e


@router.post("/sprints/{sprint_id}/scope-check")
def scope_check_for_sprint(
    sprint_id: str,
    service: Annotated[AIAnalysisService, Depends(get_analysis_service)],
    session: Annotated[Session, Depends(get_db)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    """
    Scope check over a stored sprint's association history.
    """
    try:
        return service.scope_check_for_sprint(session, sprint_id)
    except Exception as e:
        raise to_http_exception(e, "Failed to analyze scope creep") from e


@router.post("/sprint-plan")
def sprint_plan(
    request: schemas.SprintPlanRequest,
    service: Annotated[AIAnalysisService, Depends(get_analysis_service)],
    current_user: Annotated[UserModel, Depends(require_current_user)],
):
    try:
        return service.sprint_plan(request.tasks, request.team_capacity, request.sprint_duration)
    except Exception as e:
        raise to_http_exception(e, "Failed to generate sprint plan") from e
