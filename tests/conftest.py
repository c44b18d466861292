"""
Pytest configuration and shared fixtures.
"""

import os
import random
import sys
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Type

import pytest
from pydantic import BaseModel
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.append(os.path.join(os.getcwd(), "src"))

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from sprintpulse.errors import AIResponseError  # noqa: E402
from sprintpulse.storage.models import (  # noqa: E402
    Base,
    CommentModel,
    EpicModel,
    LabelModel,
    OrganizationMemberModel,
    OrganizationModel,
    SprintModel,
    SprintTaskModel,
    TaskModel,
    TeamMemberModel,
    TeamModel,
    UserModel,
    UserProfileModel,
)

# Use in-memory SQLite for speed and isolation
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


class FakeLLMProvider:
    """
    Stand-in for the generative client.

    ``json_payloads`` maps a schema name to the dict returned for it;
    a missing entry behaves like an unusable model answer.
    """

    def __init__(self, text: str = "## 🟢 What went well\n- Shipped", json_payloads: Optional[Dict[str, Any]] = None):
        self.text = text
        self.json_payloads = json_payloads or {}
        self.prompts: List[str] = []

    def complete_text(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.text

    def complete_json(self, prompt: str, schema: Type[BaseModel]) -> BaseModel:
        self.prompts.append(prompt)
        if schema.__name__ not in self.json_payloads:
            raise AIResponseError(f"AI response does not match {schema.__name__}")
        return schema.model_validate(self.json_payloads[schema.__name__])


@pytest.fixture
def engine():
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db_session) -> Dict[str, Any]:
    """
    One organization with two teams.

    Team ``team-core`` has three members (carol has no profile) and sprint
    ``sprint-1`` (2024-01-01 .. 2024-01-11) holding three of its four tasks.
    ``dave`` belongs to no organization.
    """
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)

    users = [
        UserModel(id="alice", email="alice@example.com"),
        UserModel(id="bob", email="bob@example.com"),
        UserModel(id="carol", email="carol@example.com"),
        UserModel(id="dave", email="dave@example.com"),
    ]
    profiles = [
        UserProfileModel(id="alice", full_name="Alice Smith", avatar_url="https://img/alice.png"),
        UserProfileModel(id="bob", full_name="Bob Jones"),
    ]
    db_session.add_all(users + profiles)
    db_session.add(OrganizationModel(id="org-1", name="Acme"))
    db_session.flush()

    db_session.add_all([
        OrganizationMemberModel(user_id=u, organization_id="org-1", role="member")
        for u in ("alice", "bob", "carol")
    ])
    db_session.add_all([
        TeamModel(id="team-core", organization_id="org-1", name="Core", description="Core platform"),
        TeamModel(id="team-web", organization_id="org-1", name="Web"),
    ])
    db_session.flush()
    db_session.add_all([
        TeamMemberModel(team_id="team-core", user_id=u) for u in ("alice", "bob", "carol")
    ])

    db_session.add_all([
        TaskModel(id="task-1", team_id="team-core", title="Login page", status="done", priority="high",
                  story_points=5, assignee_id="alice", created_at=created,
                  updated_at=datetime(2024, 1, 3, 12, tzinfo=timezone.utc)),
        TaskModel(id="task-2", team_id="team-core", title="Session store", status="in_progress",
                  priority="medium", story_points=8, assignee_id="bob", created_at=created, updated_at=created),
        TaskModel(id="task-3", team_id="team-core", title="Audit trail", status="todo",
                  priority="low", story_points=7, created_at=created, updated_at=created),
        TaskModel(id="task-4", team_id="team-core", title="Password reset", status="todo",
                  priority="medium", story_points=3, assignee_id="alice", due_date=date(2020, 1, 1),
                  created_at=created, updated_at=created),
        TaskModel(id="task-web", team_id="team-web", title="Landing page", status="todo",
                  created_at=created, updated_at=created),
    ])
    db_session.add(SprintModel(
        id="sprint-1", team_id="team-core", name="Sprint 1", goal="Auth",
        start_date=date(2024, 1, 1), end_date=date(2024, 1, 11), status="active",
    ))
    db_session.flush()

    db_session.add_all([
        SprintTaskModel(id="st-1", sprint_id="sprint-1", task_id="task-1", added_at=created),
        SprintTaskModel(id="st-2", sprint_id="sprint-1", task_id="task-2", added_at=created),
        # Added after the sprint started
        SprintTaskModel(id="st-3", sprint_id="sprint-1", task_id="task-3",
                        added_at=datetime(2024, 1, 4, 9, tzinfo=timezone.utc)),
    ])
    db_session.add_all([
        EpicModel(id="epic-1", team_id="team-core", title="Authentication", status="active"),
        LabelModel(id="label-1", team_id="team-core", name="backend", color="#2563eb"),
        CommentModel(id="c-1", task_id="task-1", user_id="bob", content="LGTM"),
        CommentModel(id="c-2", task_id="task-1", user_id="alice", content="Merged"),
    ])
    db_session.commit()

    return {
        "organization_id": "org-1",
        "team_id": "team-core",
        "sprint_id": "sprint-1",
        "user_id": "alice",
    }


@pytest.fixture
def fake_llm() -> FakeLLMProvider:
    return FakeLLMProvider()


@pytest.fixture
def client(session_factory, seed, fake_llm):
    """TestClient wired to the seeded SQLite database and the fake provider."""
    from fastapi.testclient import TestClient

    from sprintpulse.api.main import app
    from sprintpulse.api.dependencies import get_db, get_llm_provider, get_random_source

    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    original_dependency_overrides = app.dependency_overrides.copy()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_provider] = lambda: fake_llm
    app.dependency_overrides[get_random_source] = lambda: random.Random(7)

    yield TestClient(app)

    app.dependency_overrides = original_dependency_overrides


@pytest.fixture
def auth_headers(seed) -> Dict[str, str]:
    return {"X-User-ID": seed["user_id"]}
