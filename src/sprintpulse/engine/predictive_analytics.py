"""
Predictive Analytics

Forecasts whether an in-flight sprint will finish, from task status,
story points and the sprint calendar.

Outputs:
- Completion probability (clamped to [10, 100]) and confidence (<= 95)
- Ordered risk factors
- Short burndown projection (today plus up to 7 days)
- Recommended actions
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from sprintpulse.errors import NotFoundError
from sprintpulse.platform.logging import get_logger
from sprintpulse.storage.models import SprintModel, TaskModel
from sprintpulse.storage.repositories.sprint_repository import SprintRepository
from sprintpulse.storage.repositories.team_repository import TeamRepository

from .rounding import ceil_days, round_half_up, start_of_day

logger = get_logger(__name__)

BURNDOWN_HORIZON_DAYS = 7
FRIDAY = 4  # datetime.weekday()


def forecast_sprint(
    sprint: SprintModel,
    tasks: Sequence[TaskModel],
    member_count: int,
    now: datetime,
) -> Dict[str, Any]:
    """Pure forecast for one sprint; ``now`` must be timezone-aware."""
    total_tasks = len(tasks)
    completed_tasks = sum(1 for t in tasks if t.status == "done")
    in_progress_tasks = sum(1 for t in tasks if t.status == "in_progress")
    todo_tasks = sum(1 for t in tasks if t.status == "todo")
    unassigned_tasks = sum(1 for t in tasks if not t.assignee_id)

    total_points = sum(t.story_points or 0 for t in tasks)
    completed_points = sum(t.story_points or 0 for t in tasks if t.status == "done")
    progress_pct = completed_points / total_points * 100 if total_points > 0 else 0

    sprint_start = start_of_day(sprint.start_date)
    sprint_end = start_of_day(sprint.end_date)
    total_days = ceil_days(sprint_start, sprint_end)
    elapsed_days = ceil_days(sprint_start, now)
    remaining_days = max(0, total_days - elapsed_days)
    time_progress_pct = elapsed_days / total_days * 100 if total_days > 0 else 0

    behind_schedule = progress_pct < time_progress_pct - 10
    wip_overload = in_progress_tasks > total_tasks * 0.5
    overdue_tasks = sum(
        1 for t in tasks
        if t.due_date and start_of_day(t.due_date) < now and t.status != "done"
    )
    days_until_friday = (FRIDAY - now.weekday()) % 7

    # Order matters: callers render these as-is
    risk_factors: List[str] = []
    if unassigned_tasks > 0:
        risk_factors.append(f"{unassigned_tasks} tasks without assignees")
    if behind_schedule:
        risk_factors.append("Sprint progress behind schedule")
    if wip_overload:
        risk_factors.append("Too many tasks in progress simultaneously")
    if overdue_tasks > 0:
        risk_factors.append(f"{overdue_tasks} overdue tasks")
    if days_until_friday <= remaining_days <= BURNDOWN_HORIZON_DAYS:
        risk_factors.append("Weekend overlap in remaining sprint time")

    probability = progress_pct
    if time_progress_pct > 80 and progress_pct < 60:
        probability *= 0.7
    elif time_progress_pct < 50 and progress_pct > 70:
        probability = min(95, probability * 1.1)
    risk_penalty = min(30, len(risk_factors) * 10)
    probability = max(10, probability - risk_penalty)

    confidence = min(95, 60 + total_tasks * 5 + member_count * 10)

    remaining_points = total_points - completed_points
    daily_burn_rate = completed_points / max(1, elapsed_days)
    burndown = []
    for day in range(min(remaining_days, BURNDOWN_HORIZON_DAYS) + 1):
        predicted = max(0, remaining_points - daily_burn_rate * day)
        burndown.append({
            "date": (now + timedelta(days=day)).date().isoformat(),
            "predicted": round_half_up(predicted),
            "actual": round_half_up(remaining_points) if day == 0 else 0,
        })

    actions: List[str] = []
    if unassigned_tasks > 0:
        actions.append("Assign remaining unassigned tasks to team members")
    if behind_schedule:
        actions.append("Consider reducing sprint scope or extending timeline")
    if wip_overload:
        actions.append("Focus on completing in-progress tasks before starting new ones")
    if overdue_tasks > 0:
        actions.append("Prioritize overdue tasks for immediate attention")
    if not risk_factors:
        actions.append("Continue with current pace - sprint is on track")
    actions.append("Schedule daily stand-ups to monitor progress")

    return {
        "sprintCompletion": {
            "probability": round_half_up(probability),
            "confidence": round_half_up(confidence),
            "riskFactors": risk_factors,
        },
        "burndownPrediction": burndown,
        "recommendedActions": actions,
        "additionalMetrics": {
            "progressPercentage": round_half_up(progress_pct),
            "timeProgressPercentage": round_half_up(time_progress_pct),
            "tasksCompleted": completed_tasks,
            "totalTasks": total_tasks,
            "inProgressTasks": in_progress_tasks,
            "todoTasks": todo_tasks,
            "unassignedTasks": unassigned_tasks,
            "totalStoryPoints": total_points,
            "completedStoryPoints": completed_points,
            "elapsedDays": elapsed_days,
            "totalDays": total_days,
            "remainingDays": remaining_days,
        },
    }


class PredictiveAnalyticsService:
    """Loads a sprint with its tasks and team size, then forecasts it."""

    def __init__(self, sprint_repo: SprintRepository, team_repo: TeamRepository):
        self.sprint_repo = sprint_repo
        self.team_repo = team_repo

    def analyze(
        self,
        session: Session,
        sprint_id: Optional[str],
        team_ids: List[str],
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        sprint = self.sprint_repo.get(session, sprint_id) if sprint_id else None
        if not sprint:
            raise NotFoundError("Sprint not found", details={"sprint_id": sprint_id})

        tasks = self.sprint_repo.tasks_for_sprint(session, sprint_id)
        member_count = len(self.team_repo.member_ids(session, team_ids)) if team_ids else 0

        forecast = forecast_sprint(sprint, tasks, member_count, now or datetime.now(timezone.utc))
        logger.info(
            "sprint_forecast_generated",
            sprint_id=sprint_id,
            probability=forecast["sprintCompletion"]["probability"],
            risk_factor_count=len(forecast["sprintCompletion"]["riskFactors"]),
        )
        return forecast
