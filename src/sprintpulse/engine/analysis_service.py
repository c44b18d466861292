"""
AI Analysis Service

Generative analyses of sprint data: risk heatmap, scope creep check,
sprint plan suggestion and the stored sprint retrospective.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, TypeVar

from prometheus_client import Counter
from sqlalchemy.orm import Session

from sprintpulse.agents import prompts
from sprintpulse.agents.llm import LLMProvider
from sprintpulse.agents.schemas import RiskHeatmap, ScopeAnalysis, SprintPlanSuggestion
from sprintpulse.errors import NotFoundError, RetrospectiveExistsError
from sprintpulse.platform.logging import get_logger
from sprintpulse.storage.models import RetrospectiveModel
from sprintpulse.storage.repositories.retrospective_repository import RetrospectiveRepository
from sprintpulse.storage.repositories.sprint_repository import SprintRepository

from .rounding import as_utc, round_half_up, start_of_day
from .serialization import sprint_to_dict, task_to_dict

logger = get_logger(__name__)

AI_REQUESTS = Counter(
    "sprintpulse_ai_requests_total",
    "Generative analysis requests by operation and outcome",
    ["operation", "outcome"],
)

T = TypeVar("T")


class AIAnalysisService:
    def __init__(
        self,
        llm: LLMProvider,
        sprint_repo: SprintRepository,
        retrospective_repo: RetrospectiveRepository,
    ):
        self.llm = llm
        self.sprint_repo = sprint_repo
        self.retrospective_repo = retrospective_repo

    def _call(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            result = fn()
        except Exception:
            AI_REQUESTS.labels(operation=operation, outcome="error").inc()
            raise
        AI_REQUESTS.labels(operation=operation, outcome="ok").inc()
        return result

    # --- Caller-supplied data ---

    def risk_heatmap(self, tasks: List[Any], team_members: List[Any], current_date: str) -> Dict[str, Any]:
        prompt = prompts.risk_heatmap_prompt(tasks, team_members, current_date)
        result = self._call("risk_heatmap", lambda: self.llm.complete_json(prompt, RiskHeatmap))
        return result.model_dump()

    def scope_check(
        self,
        original_tasks: List[Any],
        current_tasks: List[Any],
        sprint_start_date: Any,
        sprint_name: Any,
    ) -> Dict[str, Any]:
        prompt = prompts.scope_check_prompt(original_tasks, current_tasks, sprint_start_date, sprint_name)
        result = self._call("scope_check", lambda: self.llm.complete_json(prompt, ScopeAnalysis))
        return result.model_dump()

    def sprint_plan(self, tasks: List[Any], team_capacity: Any, sprint_duration: Any) -> Dict[str, Any]:
        prompt = prompts.sprint_plan_prompt(tasks, team_capacity, sprint_duration)
        result = self._call("sprint_plan", lambda: self.llm.complete_json(prompt, SprintPlanSuggestion))
        return result.model_dump()

    # --- Store-assembled ---

    def scope_check_for_sprint(self, session: Session, sprint_id: str) -> Dict[str, Any]:
        """Original scope is whatever was associated before the start date ended."""
        sprint = self.sprint_repo.get(session, sprint_id)
        if not sprint:
            raise NotFoundError("Sprint not found", details={"sprint_id": sprint_id})

        start_day_end = start_of_day(sprint.start_date) + timedelta(days=1)
        original, current = [], []
        for association, task in self.sprint_repo.associations_for_sprint(session, sprint_id):
            entry = {
                "id": task.id,
                "title": task.title,
                "story_points": task.story_points,
                "added_at": as_utc(association.added_at).isoformat(),
            }
            current.append(entry)
            if as_utc(association.added_at) < start_day_end:
                original.append(entry)

        analysis = self.scope_check(original, current, sprint.start_date.isoformat(), sprint.name)
        analysis["sprintId"] = sprint.id
        return analysis

    def generate_retrospective(
        self,
        session: Session,
        sprint_id: str,
        created_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)

        sprint = self.sprint_repo.get(session, sprint_id)
        if not sprint:
            raise NotFoundError("Sprint not found", details={"sprint_id": sprint_id})

        # Saves a generation in the common case; the unique constraint decides races
        if self.retrospective_repo.get_by_sprint(session, sprint_id):
            raise RetrospectiveExistsError(sprint_id)

        tasks = self.sprint_repo.tasks_for_sprint(session, sprint_id)
        completed = [t for t in tasks if t.status == "done"]
        delayed = [
            t for t in tasks
            if t.due_date and start_of_day(t.due_date) < now and t.status != "done"
        ]
        blocked = [t for t in tasks if t.status == "todo"]
        planned_points = sum(t.story_points or 0 for t in tasks)
        completed_points = sum(t.story_points or 0 for t in completed)
        completion_rate = round_half_up(len(completed) / len(tasks) * 100) if tasks else 0

        prompt = prompts.retrospective_prompt(
            sprint=sprint_to_dict(sprint),
            completed_tasks=[task_to_dict(t) for t in completed],
            delayed_tasks=[task_to_dict(t) for t in delayed],
            blocked_tasks=[task_to_dict(t) for t in blocked],
            total_count=len(tasks),
            completion_rate=completion_rate,
            planned_points=planned_points,
            completed_points=completed_points,
        )
        content = self._call("retrospective", lambda: self.llm.complete_text(prompt))

        retrospective = self.retrospective_repo.create(
            session,
            RetrospectiveModel(
                id=str(uuid.uuid4()),
                sprint_id=sprint_id,
                content=content,
                created_by=created_by,
                created_at=now,
            ),
        )
        logger.info("retrospective_created", sprint_id=sprint_id, retrospective_id=retrospective.id)

        return {
            "id": retrospective.id,
            "sprintId": retrospective.sprint_id,
            "content": retrospective.content,
            "createdAt": as_utc(retrospective.created_at).isoformat(),
        }
