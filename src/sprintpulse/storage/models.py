from datetime import date, datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import (
    String, Integer, Text, Date, DateTime, ForeignKey,
    Index, UniqueConstraint, func
)
from sqlalchemy.dialects.postgresql import TIMESTAMP


class Base(DeclarativeBase):
    pass


# Postgres TIMESTAMPTZ, generic DateTime for SQLite tests
TIMESTAMP_TYPE = DateTime(timezone=True).with_variant(TIMESTAMP(timezone=True), 'postgresql')


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Identity ---

class UserModel(Base):
    """Identity row mirrored from the external session provider."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())

    profile: Mapped[Optional["UserProfileModel"]] = relationship(back_populates="user", uselist=False)


class UserProfileModel(Base):
    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    full_name: Mapped[Optional[str]] = mapped_column(String)
    avatar_url: Mapped[Optional[str]] = mapped_column(String)

    user: Mapped["UserModel"] = relationship(back_populates="profile")


# --- Tenancy ---

class OrganizationModel(Base):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())

    teams: Mapped[List["TeamModel"]] = relationship(back_populates="organization")


class OrganizationMemberModel(Base):
    __tablename__ = "organization_members"

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    organization_id: Mapped[str] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"), primary_key=True)
    role: Mapped[str] = mapped_column(String, server_default='member')


class TeamModel(Base):
    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    organization_id: Mapped[str] = mapped_column(ForeignKey("organizations.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())

    organization: Mapped["OrganizationModel"] = relationship(back_populates="teams")


class TeamMemberModel(Base):
    """Join of a user to a team. Presence is the only access rule."""
    __tablename__ = "team_members"

    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    joined_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())


# --- Work items ---

class TaskModel(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String, server_default='task')  # bug, story, task
    status: Mapped[str] = mapped_column(String, server_default='todo', index=True)  # todo, in_progress, review, done
    priority: Mapped[str] = mapped_column(String, server_default='medium')  # low, medium, high
    story_points: Mapped[Optional[int]] = mapped_column(Integer)
    assignee_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), index=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date)
    epic_id: Mapped[Optional[str]] = mapped_column(ForeignKey("epics.id"))
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now(), onupdate=utcnow)


class SprintModel(Base):
    __tablename__ = "sprints"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    goal: Mapped[Optional[str]] = mapped_column(Text)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, server_default='planning', index=True)  # planning, active, completed
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())

    team: Mapped["TeamModel"] = relationship()


class SprintTaskModel(Base):
    """Sprint scope history; added_at reconstructs what was in scope when."""
    __tablename__ = "sprint_tasks"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    sprint_id: Mapped[str] = mapped_column(ForeignKey("sprints.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id: Mapped[str] = mapped_column(ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    added_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())

    sprint: Mapped["SprintModel"] = relationship()
    task: Mapped["TaskModel"] = relationship()

    __table_args__ = (
        Index('idx_sprint_tasks_sprint_task', 'sprint_id', 'task_id'),
    )


class EpicModel(Base):
    __tablename__ = "epics"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String, server_default='planning')  # planning, active, completed, cancelled
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())


class LabelModel(Base):
    __tablename__ = "labels"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    team_id: Mapped[str] = mapped_column(ForeignKey("teams.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    color: Mapped[str] = mapped_column(String, server_default='#6b7280')
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())


class CommentModel(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    task_id: Mapped[str] = mapped_column(ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())


# --- Retrospectives ---

class RetrospectiveModel(Base):
    __tablename__ = "retrospectives"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    sprint_id: Mapped[str] = mapped_column(ForeignKey("sprints.id", ondelete="CASCADE"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)  # markdown
    created_by: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, default=utcnow, server_default=func.now())

    # One retrospective per sprint; concurrent inserts lose on this constraint
    __table_args__ = (
        UniqueConstraint('sprint_id', name='uq_retrospectives_sprint'),
    )
