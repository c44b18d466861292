import random
from datetime import date, datetime, timedelta, timezone

import pytest

from sprintpulse.engine.performance_metrics import (
    PerformanceMetricsService,
    simulated_quality_metrics,
    summarize_member_productivity,
    summarize_sprint_velocity,
)
from sprintpulse.errors import NotFoundError
from sprintpulse.storage.models import SprintModel, TaskModel, UserProfileModel
from sprintpulse.storage.repositories.sprint_repository import SprintRepository
from sprintpulse.storage.repositories.team_repository import TeamRepository


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def sprint(sprint_id: str, name: str) -> SprintModel:
    return SprintModel(id=sprint_id, team_id="t", name=name, start_date=date(2024, 1, 1), end_date=date(2024, 1, 14))


def task(status, points, assignee=None, created=utc(2024, 1, 1), updated=utc(2024, 1, 1)) -> TaskModel:
    return TaskModel(id=f"{status}-{points}", team_id="t", title="Task", status=status, story_points=points,
                     assignee_id=assignee, created_at=created, updated_at=updated)


def test_sprint_velocity():
    sprints = [sprint("s1", "Sprint 1"), sprint("s2", "Sprint 2")]
    pairs = [
        ("s1", task("done", 3)),
        ("s1", task("todo", 5)),
        ("s1", task("done", None)),
    ]

    velocity = summarize_sprint_velocity(sprints, pairs)

    assert velocity[0] == {"sprintName": "Sprint 1", "plannedPoints": 8, "completedPoints": 3, "completionRate": 38}
    # No points planned
    assert velocity[1] == {"sprintName": "Sprint 2", "plannedPoints": 0, "completedPoints": 0, "completionRate": 0}


def test_member_productivity():
    members = [
        ("u1", UserProfileModel(id="u1", full_name="Ada")),
        ("u2", UserProfileModel(id="u2", full_name=None)),
    ]
    pairs = [
        ("s1", task("done", 3, "u1", updated=utc(2024, 1, 3, 12))),  # 2.5 days -> 3
        ("s1", task("done", 2, "u1", updated=utc(2024, 1, 2))),  # 1 day
        ("s1", task("in_progress", 2, "u2")),
    ]

    productivity = summarize_member_productivity(members, pairs)

    assert productivity[0] == {"memberName": "Ada", "tasksCompleted": 2, "averageCompletionTime": 2.0, "efficiency": 20}
    assert productivity[1] == {"memberName": "Unknown", "tasksCompleted": 0, "averageCompletionTime": 0, "efficiency": 0}


def test_same_instant_completion_has_zero_efficiency():
    members = [("u1", UserProfileModel(id="u1", full_name="Ada"))]
    pairs = [("s1", task("done", 1, "u1"))]

    productivity = summarize_member_productivity(members, pairs)

    assert productivity[0]["averageCompletionTime"] == 0
    assert productivity[0]["efficiency"] == 0


def test_efficiency_is_capped():
    members = [("u1", UserProfileModel(id="u1", full_name="Ada"))]
    pairs = [("s1", task("done", 1, "u1", updated=utc(2024, 1, 1, 1))) for _ in range(6)]

    assert summarize_member_productivity(members, pairs)[0]["efficiency"] == 100


def test_quality_metrics_are_flagged_and_bounded():
    metrics = simulated_quality_metrics(random.Random(0))

    assert metrics["isSimulated"] is True
    assert 0 <= metrics["bugRate"] <= 5
    assert 0 <= metrics["reworkPercentage"] <= 15
    assert 4 <= metrics["customerSatisfaction"] <= 5


class TestPerformanceMetricsService:

    def test_generate_for_seeded_team(self, db_session, seed):
        service = PerformanceMetricsService(SprintRepository(), TeamRepository(), rng=random.Random(1))

        result = service.generate(db_session, [seed["team_id"]])

        assert result["sprintVelocity"] == [
            {"sprintName": "Sprint 1", "plannedPoints": 20, "completedPoints": 5, "completionRate": 25}
        ]
        by_name = {m["memberName"]: m for m in result["teamProductivity"]}
        # carol has no profile
        assert set(by_name) == {"Alice Smith", "Bob Jones"}
        assert by_name["Alice Smith"]["tasksCompleted"] == 1
        assert by_name["Alice Smith"]["averageCompletionTime"] == 3.0
        assert by_name["Alice Smith"]["efficiency"] == 7
        assert result["qualityMetrics"]["isSimulated"] is True

    def test_no_sprints_in_window(self, db_session, seed):
        service = PerformanceMetricsService(SprintRepository(), TeamRepository())

        with pytest.raises(NotFoundError):
            service.generate(db_session, ["team-web"])

    def test_window_excludes_old_sprints(self, db_session, seed):
        service = PerformanceMetricsService(SprintRepository(), TeamRepository())
        far_future = datetime.now(timezone.utc) + timedelta(days=365)

        with pytest.raises(NotFoundError):
            service.generate(db_session, [seed["team_id"]], time_range=30, now=far_future)
