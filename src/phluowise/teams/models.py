"""Team records."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from phluowise.storage.collections import RecordModel


class TeamRole(str, Enum):
    """Team member roles."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class TeamMember(RecordModel):
    """Membership entry embedded in a team."""
    user_id: str
    role: TeamRole = TeamRole.MEMBER
    joined_at: datetime


class Team(RecordModel):
    """Team of referrers.

    A user id appears at most once in ``members``. The owner is matched
    through ``owner_id`` and is not required to be listed as a member.
    """
    id: str
    owner_id: str
    name: str
    description: str | None = None
    members: list[TeamMember] = Field(default_factory=list)

    # Timestamps
    created_at: datetime
    updated_at: datetime

    def __repr__(self):
        return f"<Team(id={self.id}, name={self.name}, members={len(self.members)})>"

    def has_member(self, user_id: str) -> bool:
        return any(m.user_id == user_id for m in self.members)
