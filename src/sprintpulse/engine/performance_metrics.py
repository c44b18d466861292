"""
Performance Metrics

Sprint velocity and per-member productivity over a lookback window.

Metrics:
- Per sprint: planned points, completed points, completion rate
- Per member: completed tasks, average completion time (days), efficiency
- Quality: simulated values only, flagged with ``isSimulated``

Usage:
    service = PerformanceMetricsService(SprintRepository(), TeamRepository())
    metrics = service.generate(session, team_ids=["team-1"], time_range=30)
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from sprintpulse.errors import NotFoundError
from sprintpulse.platform.logging import get_logger
from sprintpulse.storage.models import SprintModel, TaskModel, UserProfileModel
from sprintpulse.storage.repositories.sprint_repository import SprintRepository
from sprintpulse.storage.repositories.team_repository import TeamRepository

from .rounding import ceil_days, round_half_up

logger = get_logger(__name__)

DONE = "done"


def summarize_sprint_velocity(
    sprints: Sequence[SprintModel],
    sprint_tasks: Sequence[Tuple[str, TaskModel]],
) -> List[Dict[str, Any]]:
    velocity = []
    for sprint in sprints:
        tasks = [task for sprint_id, task in sprint_tasks if sprint_id == sprint.id]
        planned_points = sum(task.story_points or 0 for task in tasks)
        completed_points = sum(task.story_points or 0 for task in tasks if task.status == DONE)
        completion_rate = (
            round_half_up(completed_points / planned_points * 100) if planned_points > 0 else 0
        )
        velocity.append({
            "sprintName": sprint.name,
            "plannedPoints": planned_points,
            "completedPoints": completed_points,
            "completionRate": completion_rate,
        })
    return velocity


def summarize_member_productivity(
    members: Sequence[Tuple[str, Optional[UserProfileModel]]],
    sprint_tasks: Sequence[Tuple[str, TaskModel]],
) -> List[Dict[str, Any]]:
    productivity = []
    for user_id, profile in members:
        completed = [
            task for _, task in sprint_tasks
            if task.assignee_id == user_id and task.status == DONE
        ]
        completion_times = [ceil_days(task.created_at, task.updated_at) for task in completed]

        average_completion_time = (
            round_half_up(sum(completion_times) / len(completion_times), 1)
            if completion_times else 0
        )
        efficiency = (
            min(100, round_half_up(len(completed) * 20 / average_completion_time))
            if completed and average_completion_time > 0 else 0
        )

        productivity.append({
            "memberName": (profile.full_name if profile else None) or "Unknown",
            "tasksCompleted": len(completed),
            "averageCompletionTime": average_completion_time,
            "efficiency": efficiency,
        })
    return productivity


def simulated_quality_metrics(rng: random.Random) -> Dict[str, Any]:
    """
    Placeholder quality figures. Nothing here is derived from stored data;
    replacing them with real measures is an open product decision.
    """
    return {
        "bugRate": round_half_up(rng.random() * 5, 1),
        "reworkPercentage": round_half_up(rng.random() * 15, 1),
        "customerSatisfaction": round_half_up(4 + rng.random(), 1),
        "isSimulated": True,
    }


class PerformanceMetricsService:
    """Builds the performance dashboard payload for a set of teams."""

    def __init__(
        self,
        sprint_repo: SprintRepository,
        team_repo: TeamRepository,
        rng: Optional[random.Random] = None,
    ):
        self.sprint_repo = sprint_repo
        self.team_repo = team_repo
        self.rng = rng or random.Random()

    def generate(
        self,
        session: Session,
        team_ids: List[str],
        time_range: int = 30,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=time_range)

        sprints = self.sprint_repo.list_created_since(session, team_ids, since)
        if not sprints:
            raise NotFoundError("No sprints found")

        sprint_tasks = self.sprint_repo.tasks_for_sprints(session, [s.id for s in sprints])
        members = [
            (user_id, profile)
            for user_id, profile in self.team_repo.members_with_profiles(session, team_ids)
            if profile is not None
        ]

        logger.info(
            "performance_metrics_generated",
            team_count=len(team_ids),
            sprint_count=len(sprints),
            task_count=len(sprint_tasks),
        )

        return {
            "sprintVelocity": summarize_sprint_velocity(sprints, sprint_tasks),
            "teamProductivity": summarize_member_productivity(members, sprint_tasks),
            "qualityMetrics": simulated_quality_metrics(self.rng),
        }
