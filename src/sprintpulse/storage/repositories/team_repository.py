from typing import Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select

from sprintpulse.storage.models import (
    EpicModel,
    LabelModel,
    OrganizationMemberModel,
    TeamMemberModel,
    TeamModel,
    UserProfileModel,
)


class TeamRepository:
    """Read access to teams, their members and team-owned catalogues."""

    def get(self, session: Session, team_id: str) -> Optional[TeamModel]:
        return session.get(TeamModel, team_id)

    def organization_id_for_user(self, session: Session, user_id: str) -> Optional[str]:
        stmt = select(OrganizationMemberModel.organization_id).where(
            OrganizationMemberModel.user_id == user_id
        )
        return session.scalars(stmt).first()

    def list_for_organization(self, session: Session, organization_id: str) -> List[TeamModel]:
        stmt = (
            select(TeamModel)
            .where(TeamModel.organization_id == organization_id)
            .order_by(TeamModel.created_at.desc())
        )
        return list(session.scalars(stmt).all())

    def member_ids(self, session: Session, team_ids: Iterable[str]) -> List[str]:
        """One entry per membership row; a user in two teams appears twice."""
        stmt = select(TeamMemberModel.user_id).where(TeamMemberModel.team_id.in_(list(team_ids)))
        return list(session.scalars(stmt).all())

    def members_with_profiles(self, session: Session, team_ids: Iterable[str]) -> List[Tuple[str, Optional[UserProfileModel]]]:
        stmt = (
            select(TeamMemberModel.user_id, UserProfileModel)
            .outerjoin(UserProfileModel, UserProfileModel.id == TeamMemberModel.user_id)
            .where(TeamMemberModel.team_id.in_(list(team_ids)))
        )
        return [(row[0], row[1]) for row in session.execute(stmt).all()]

    def profiles(self, session: Session, user_ids: Iterable[str]) -> List[UserProfileModel]:
        ids = list(user_ids)
        if not ids:
            return []
        stmt = select(UserProfileModel).where(UserProfileModel.id.in_(ids))
        return list(session.scalars(stmt).all())

    def epics(self, session: Session, team_id: str) -> List[EpicModel]:
        stmt = select(EpicModel).where(EpicModel.team_id == team_id).order_by(EpicModel.created_at.desc())
        return list(session.scalars(stmt).all())

    def labels(self, session: Session, team_id: str) -> List[LabelModel]:
        stmt = select(LabelModel).where(LabelModel.team_id == team_id).order_by(LabelModel.name)
        return list(session.scalars(stmt).all())
