import random
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from sprintpulse.agents.llm import LLMProvider, OpenAIProvider
from sprintpulse.api.database import get_db, get_postgres_adapter
from sprintpulse.api.dependencies_auth import get_current_user, require_current_user
from sprintpulse.engine.analysis_service import AIAnalysisService
from sprintpulse.engine.dashboard_views import DashboardViewService
from sprintpulse.engine.performance_metrics import PerformanceMetricsService
from sprintpulse.engine.predictive_analytics import PredictiveAnalyticsService
from sprintpulse.engine.sprint_planning import SprintPlanningService
from sprintpulse.engine.work_items import WorkItemService
from sprintpulse.platform.config import settings
from sprintpulse.platform.logging import get_logger
from sprintpulse.storage.postgres_adapter import PostgresAdapter, PostgresConfig
from sprintpulse.storage.repositories.retrospective_repository import RetrospectiveRepository
from sprintpulse.storage.repositories.sprint_repository import SprintRepository
from sprintpulse.storage.repositories.task_repository import TaskRepository
from sprintpulse.storage.repositories.team_repository import TeamRepository

__all__ = [
    "get_db",
    "get_postgres_adapter",
    "get_current_user",
    "require_current_user",
]

logger = get_logger(__name__)


def init_resources(app: FastAPI) -> None:
    """Create the store adapter and generative client for this app."""
    adapter = PostgresAdapter(PostgresConfig())
    adapter.connect()
    app.state.postgres = adapter
    app.state.llm = OpenAIProvider.from_settings(settings)
    app.state.rng = random.Random()
    logger.info("resources_initialized", model=settings.OPENAI_MODEL)


def close_resources(app: FastAPI) -> None:
    adapter = getattr(app.state, "postgres", None)
    if adapter:
        adapter.close()
        app.state.postgres = None
    app.state.llm = None


def get_llm_provider(request: Request) -> LLMProvider:
    return request.app.state.llm


def get_random_source(request: Request) -> random.Random:
    return getattr(request.app.state, "rng", None) or random.Random()


# =============================================================================
# SERVICES
# =============================================================================


def get_work_item_service() -> WorkItemService:
    return WorkItemService(task_repo=TaskRepository(), sprint_repo=SprintRepository())


def get_sprint_planning_service() -> SprintPlanningService:
    return SprintPlanningService(sprint_repo=SprintRepository(), task_repo=TaskRepository())


def get_performance_metrics_service(
    rng: Annotated[random.Random, Depends(get_random_source)],
) -> PerformanceMetricsService:
    return PerformanceMetricsService(
        sprint_repo=SprintRepository(),
        team_repo=TeamRepository(),
        rng=rng,
    )


def get_predictive_analytics_service() -> PredictiveAnalyticsService:
    return PredictiveAnalyticsService(sprint_repo=SprintRepository(), team_repo=TeamRepository())


def get_analysis_service(
    llm: Annotated[LLMProvider, Depends(get_llm_provider)],
) -> AIAnalysisService:
    return AIAnalysisService(
        llm=llm,
        sprint_repo=SprintRepository(),
        retrospective_repo=RetrospectiveRepository(),
    )


def get_dashboard_service(
    rng: Annotated[random.Random, Depends(get_random_source)],
) -> DashboardViewService:
    return DashboardViewService(
        team_repo=TeamRepository(),
        sprint_repo=SprintRepository(),
        task_repo=TaskRepository(),
        default_capacity_hours=settings.DEFAULT_MEMBER_CAPACITY_HOURS,
        rng=rng,
    )


def get_retrospective_repository() -> RetrospectiveRepository:
    return RetrospectiveRepository()


def get_sprint_repository() -> SprintRepository:
    return SprintRepository()
