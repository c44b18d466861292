"""SprintPulse Storage Layer - Relational store adapter, models and repositories."""

from .base import StorageAdapter
from .postgres_adapter import PostgresAdapter, PostgresConfig
from .models import (
    Base,
    CommentModel,
    EpicModel,
    LabelModel,
    OrganizationMemberModel,
    OrganizationModel,
    RetrospectiveModel,
    SprintModel,
    SprintTaskModel,
    TaskModel,
    TeamMemberModel,
    TeamModel,
    UserModel,
    UserProfileModel,
)

__all__ = [
    "StorageAdapter",
    "PostgresAdapter",
    "PostgresConfig",
    "Base",
    "UserModel",
    "UserProfileModel",
    "OrganizationModel",
    "OrganizationMemberModel",
    "TeamModel",
    "TeamMemberModel",
    "TaskModel",
    "SprintModel",
    "SprintTaskModel",
    "EpicModel",
    "LabelModel",
    "CommentModel",
    "RetrospectiveModel",
]
