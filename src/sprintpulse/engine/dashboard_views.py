"""
Dashboard view-models.

Counting and percentage rounding over stored rows for the dashboard,
team, backlog and kanban screens. Values marked simulated are
placeholders with no stored source.
"""

import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from sprintpulse.errors import NotFoundError
from sprintpulse.storage.models import TaskModel, UserProfileModel
from sprintpulse.storage.repositories.sprint_repository import SprintRepository
from sprintpulse.storage.repositories.task_repository import TaskRepository
from sprintpulse.storage.repositories.team_repository import TeamRepository

from .rounding import round_half_up, start_of_day
from .serialization import initials, task_to_dict

ROSTER_PREVIEW_SIZE = 4
RECENT_SPRINT_LIMIT = 5


def _assignee(profile: Optional[UserProfileModel]) -> Optional[Dict[str, Any]]:
    if not profile:
        return None
    return {
        "name": profile.full_name or "Unknown User",
        "avatar": profile.avatar_url,
        "initials": initials(profile.full_name),
    }


class DashboardViewService:
    def __init__(
        self,
        team_repo: TeamRepository,
        sprint_repo: SprintRepository,
        task_repo: TaskRepository,
        default_capacity_hours: int = 40,
        rng: Optional[random.Random] = None,
    ):
        self.team_repo = team_repo
        self.sprint_repo = sprint_repo
        self.task_repo = task_repo
        self.default_capacity_hours = default_capacity_hours
        self.rng = rng or random.Random()

    def _organization_team_ids(self, session: Session, user_id: str) -> List[str]:
        organization_id = self.team_repo.organization_id_for_user(session, user_id)
        if not organization_id:
            raise NotFoundError("No organization found for user")
        return [team.id for team in self.team_repo.list_for_organization(session, organization_id)]

    def _require_team(self, session: Session, team_id: str) -> None:
        if not self.team_repo.get(session, team_id):
            raise NotFoundError("Team not found", details={"team_id": team_id})

    def _profiles_by_id(self, session: Session, tasks: List[TaskModel]) -> Dict[str, UserProfileModel]:
        assignee_ids = {t.assignee_id for t in tasks if t.assignee_id}
        return {p.id: p for p in self.team_repo.profiles(session, assignee_ids)}

    def summary(self, session: Session, user_id: str) -> Dict[str, Any]:
        team_ids = self._organization_team_ids(session, user_id)
        if not team_ids:
            return {
                "stats": {"activeSprints": 0, "completedTasks": 0, "inProgressTasks": 0, "blockedTasks": 0, "blockedTasksSimulated": True},
                "sprints": [],
            }

        recent = self.sprint_repo.recent_by_teams(session, team_ids, limit=RECENT_SPRINT_LIMIT)
        tasks = self.task_repo.list_by_teams(session, team_ids)

        stats = {
            "activeSprints": sum(1 for s in recent if s.status == "active"),
            "completedTasks": sum(1 for t in tasks if t.status == "done"),
            "inProgressTasks": sum(1 for t in tasks if t.status == "in_progress"),
            # No blocking data is stored yet
            "blockedTasks": self.rng.randrange(3),
            "blockedTasksSimulated": True,
        }

        sprints = []
        for sprint in recent:
            sprint_tasks = self.sprint_repo.tasks_for_sprint(session, sprint.id)
            task_count = len(sprint_tasks)
            completed = sum(1 for t in sprint_tasks if t.status == "done")
            sprints.append({
                "id": sprint.id,
                "name": sprint.name,
                "team_name": sprint.team.name,
                "progress": round_half_up(completed / task_count * 100) if task_count > 0 else 0,
                "status": sprint.status,
                "end_date": sprint.end_date.isoformat(),
                "task_count": task_count,
                "completed_tasks": completed,
            })

        return {"stats": stats, "sprints": sprints}

    def teams_overview(self, session: Session, user_id: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        now = now or datetime.now(timezone.utc)
        month_start = start_of_day(now.date().replace(day=1))
        organization_id = self.team_repo.organization_id_for_user(session, user_id)
        if not organization_id:
            raise NotFoundError("No organization found for user")

        overview = []
        for team in self.team_repo.list_for_organization(session, organization_id):
            members = [
                {
                    "name": profile.full_name or "Unknown User",
                    "avatar": profile.avatar_url,
                    "initials": initials(profile.full_name),
                    "role": "Member",
                }
                for _, profile in self.team_repo.members_with_profiles(session, [team.id])
                if profile is not None
            ]
            active = self.sprint_repo.list_by_team(session, team.id, status="active")
            overview.append({
                "id": team.id,
                "name": team.name,
                "description": team.description,
                "memberCount": len(members),
                "activeSprintCount": len(active),
                "completedTasksThisMonth": self.task_repo.count_done_since(session, team.id, month_start),
                "members": members[:ROSTER_PREVIEW_SIZE],
                "currentSprint": active[0].name if active else None,
                "sprintProgress": self.rng.randrange(100),
                "sprintProgressSimulated": True,
            })
        return overview

    def team_members(self, session: Session, team_id: str) -> List[Dict[str, Any]]:
        self._require_team(session, team_id)
        return [
            {
                "id": user_id,
                "name": (profile.full_name if profile else None) or "Unknown User",
                "avatar": profile.avatar_url if profile else None,
                "initials": initials(profile.full_name if profile else None),
                "capacity": self.default_capacity_hours,
            }
            for user_id, profile in self.team_repo.members_with_profiles(session, [team_id])
        ]

    def backlog(self, session: Session, team_id: str) -> List[Dict[str, Any]]:
        """Team tasks not associated with any of the team's sprints."""
        self._require_team(session, team_id)
        in_sprints = self.sprint_repo.task_ids_in_team_sprints(session, team_id)
        tasks = [t for t in self.task_repo.list_by_team(session, team_id) if t.id not in in_sprints]
        profiles = self._profiles_by_id(session, tasks)
        return [
            {**task_to_dict(t), "assignee": _assignee(profiles.get(t.assignee_id))}
            for t in tasks
        ]

    def kanban(
        self,
        session: Session,
        team_id: str,
        sprint_filter: str = "all",
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Board cards for one team.

        sprint_filter is ``all``, ``backlog`` or a sprint id.
        """
        self._require_team(session, team_id)
        now = now or datetime.now(timezone.utc)

        if sprint_filter == "backlog":
            in_sprints = self.sprint_repo.task_ids_in_team_sprints(session, team_id)
            tasks = [t for t in self.task_repo.list_by_team(session, team_id) if t.id not in in_sprints]
        elif sprint_filter == "all":
            tasks = self.task_repo.list_by_team(session, team_id)
        else:
            tasks = [t for t in self.sprint_repo.tasks_for_sprint(session, sprint_filter) if t.team_id == team_id]

        profiles = self._profiles_by_id(session, tasks)
        comment_counts = self.task_repo.comment_counts(session, [t.id for t in tasks])

        cards = []
        for task in tasks:
            sprint = self.sprint_repo.sprint_for_task(session, task.id)
            cards.append({
                **task_to_dict(task),
                "assignee": _assignee(profiles.get(task.assignee_id)),
                "sprint": {"id": sprint.id, "name": sprint.name, "status": sprint.status} if sprint else None,
                "isBlocked": False,
                "isOverdue": bool(task.due_date) and start_of_day(task.due_date) < now and task.status != "done",
                "commentCount": comment_counts.get(task.id, 0),
            })

        sprint_options = [
            {"id": "all", "name": "All Tasks", "status": "all"},
            {"id": "backlog", "name": "Backlog (No Sprint)", "status": "backlog"},
        ] + [
            {"id": s.id, "name": s.name, "status": s.status}
            for s in self.sprint_repo.list_by_team(session, team_id)
        ]

        return {"tasks": cards, "sprints": sprint_options}

    def epics_and_labels(self, session: Session, team_id: str) -> Dict[str, Any]:
        self._require_team(session, team_id)
        return {
            "epics": [
                {
                    "id": e.id,
                    "title": e.title,
                    "description": e.description,
                    "status": e.status,
                    "created_at": e.created_at.isoformat() if e.created_at else None,
                }
                for e in self.team_repo.epics(session, team_id)
            ],
            "labels": [
                {
                    "id": label.id,
                    "name": label.name,
                    "color": label.color,
                    "created_at": label.created_at.isoformat() if label.created_at else None,
                }
                for label in self.team_repo.labels(session, team_id)
            ],
        }
