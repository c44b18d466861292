from datetime import date, datetime, timezone

import pytest
from sqlalchemy import select

from sprintpulse.engine.sprint_planning import SprintPlanningService
from sprintpulse.engine.work_items import WorkItemService
from sprintpulse.errors import NotFoundError, ValidationFailed
from sprintpulse.storage.models import CommentModel, SprintModel, SprintTaskModel, TaskModel
from sprintpulse.storage.repositories.sprint_repository import SprintRepository
from sprintpulse.storage.repositories.task_repository import TaskRepository


@pytest.fixture
def work_items():
    return WorkItemService(TaskRepository(), SprintRepository())


@pytest.fixture
def planning():
    return SprintPlanningService(SprintRepository(), TaskRepository())


class TestWorkItemService:

    def test_create_task_applies_defaults(self, db_session, seed, work_items):
        task = work_items.create_task(db_session, team_id=seed["team_id"], title="New", story_points=0)

        assert (task.type, task.priority, task.status) == ("task", "medium", "todo")
        assert task.story_points is None
        assert db_session.get(TaskModel, task.id) is not None

    def test_create_task_requires_team_and_title(self, db_session, seed, work_items):
        with pytest.raises(ValidationFailed):
            work_items.create_task(db_session, team_id=seed["team_id"], title="")
        with pytest.raises(ValidationFailed):
            work_items.create_task(db_session, team_id=None, title="New")

    def test_add_task_to_sprint(self, db_session, seed, work_items):
        association = work_items.add_task_to_sprint(db_session, seed["sprint_id"], "task-4")

        assert association.sprint_id == seed["sprint_id"]
        assert "task-4" in SprintRepository().task_ids_in_team_sprints(db_session, seed["team_id"])

    def test_update_status(self, db_session, seed, work_items):
        task = work_items.update_task_status(db_session, "task-3", "review")

        assert task.status == "review"

    def test_update_status_rejects_unknown_column(self, db_session, seed, work_items):
        with pytest.raises(ValidationFailed):
            work_items.update_task_status(db_session, "task-3", "archived")

    def test_update_status_unknown_task(self, db_session, seed, work_items):
        with pytest.raises(NotFoundError):
            work_items.update_task_status(db_session, "missing", "done")


class TestTaskEditing:

    @pytest.fixture
    def second_sprint(self, db_session, seed):
        db_session.add(SprintModel(
            id="sprint-2", team_id=seed["team_id"], name="Sprint 2",
            start_date=date(2024, 1, 15), end_date=date(2024, 1, 29), status="planning",
        ))
        db_session.commit()
        return "sprint-2"

    def test_update_fields(self, db_session, seed, work_items):
        now = datetime(2024, 1, 5, 8, tzinfo=timezone.utc)

        task = work_items.update_task(
            db_session,
            "task-3",
            {"title": "  Audit log ", "description": "   ", "priority": "high", "story_points": 0, "assignee_id": "bob"},
            now=now,
        )

        assert task.title == "Audit log"
        assert task.description is None
        assert task.priority == "high"
        assert task.story_points is None
        assert task.assignee_id == "bob"
        assert task.updated_at == now
        # Fields not sent are kept
        assert task.status == "todo"

    def test_update_rejects_blank_title(self, db_session, seed, work_items):
        with pytest.raises(ValidationFailed):
            work_items.update_task(db_session, "task-3", {"title": "  "})

    def test_update_rejects_unknown_status(self, db_session, seed, work_items):
        with pytest.raises(ValidationFailed):
            work_items.update_task(db_session, "task-3", {"status": "archived"})

    def test_update_unknown_task(self, db_session, seed, work_items):
        with pytest.raises(NotFoundError):
            work_items.update_task(db_session, "missing", {"title": "x"})

    def test_move_between_sprints(self, db_session, seed, work_items, second_sprint):
        sprints = SprintRepository()

        work_items.update_task(db_session, "task-3", {"sprint_id": second_sprint})

        assert sprints.sprint_for_task(db_session, "task-3").id == second_sprint
        assert sorted(t.id for t in sprints.tasks_for_sprint(db_session, seed["sprint_id"])) == ["task-1", "task-2"]

    def test_move_to_backlog(self, db_session, seed, work_items):
        work_items.update_task(db_session, "task-2", {"sprint_id": None})

        assert SprintRepository().sprint_for_task(db_session, "task-2") is None

    def test_same_sprint_keeps_association(self, db_session, seed, work_items):
        work_items.update_task(db_session, "task-1", {"sprint_id": seed["sprint_id"]})

        assert db_session.get(SprintTaskModel, "st-1") is not None

    def test_move_to_unknown_sprint(self, db_session, seed, work_items):
        with pytest.raises(NotFoundError):
            work_items.update_task(db_session, "task-3", {"sprint_id": "missing"})

        assert SprintRepository().sprint_for_task(db_session, "task-3").id == seed["sprint_id"]

    def test_delete_task_with_associations_and_comments(self, db_session, seed, work_items):
        work_items.delete_task(db_session, "task-1")
        db_session.commit()

        assert db_session.get(TaskModel, "task-1") is None
        assert db_session.scalars(select(SprintTaskModel).where(SprintTaskModel.task_id == "task-1")).all() == []
        assert db_session.scalars(select(CommentModel).where(CommentModel.task_id == "task-1")).all() == []

    def test_delete_unknown_task(self, db_session, seed, work_items):
        with pytest.raises(NotFoundError):
            work_items.delete_task(db_session, "missing")

    def test_add_comment(self, db_session, seed, work_items):
        comment = work_items.add_comment(db_session, "task-3", "bob", "  Needs a migration ")

        assert comment.content == "Needs a migration"
        assert TaskRepository().comment_counts(db_session, ["task-3"]) == {"task-3": 1}

    def test_add_blank_comment(self, db_session, seed, work_items):
        with pytest.raises(ValidationFailed):
            work_items.add_comment(db_session, "task-3", "bob", " ")

    def test_comment_on_unknown_task(self, db_session, seed, work_items):
        with pytest.raises(NotFoundError):
            work_items.add_comment(db_session, "missing", "bob", "Hello")


class TestSprintPlanningService:

    def test_create_sprint_commits_team_tasks(self, db_session, seed, planning):
        result = planning.create_sprint(
            db_session,
            team_id=seed["team_id"],
            name="Sprint 2",
            start_date=date(2024, 1, 15),
            end_date=date(2024, 1, 29),
            task_ids=["task-4", "task-web", "missing", "task-4"],
        )

        assert result["status"] == "planning"
        assert result["committedTaskIds"] == ["task-4"]
        assert result["skippedTaskIds"] == ["task-web", "missing"]
        assert db_session.get(TaskModel, "task-4").status == "in_progress"
        associations = db_session.scalars(
            select(SprintTaskModel).where(SprintTaskModel.sprint_id == result["sprintId"])
        ).all()
        assert [a.task_id for a in associations] == ["task-4"]

    def test_end_before_start(self, db_session, seed, planning):
        with pytest.raises(ValidationFailed):
            planning.create_sprint(db_session, seed["team_id"], "Bad", date(2024, 2, 1), date(2024, 1, 1))

    def test_missing_name(self, db_session, seed, planning):
        with pytest.raises(ValidationFailed):
            planning.create_sprint(db_session, seed["team_id"], None, date(2024, 1, 1), date(2024, 1, 14))
