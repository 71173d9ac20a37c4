"""Team service for managing teams and their members."""

from phluowise.core import Clock, generate_id, utcnow
from phluowise.errors import AlreadyMemberError, NotFoundError
from phluowise.logging_config import get_logger
from phluowise.storage.collections import Collection, Storage, get_storage
from phluowise.teams.models import Team, TeamMember, TeamRole

logger = get_logger(__name__)


class TeamService:
    """Service for managing teams."""

    def __init__(self, storage: Storage | None = None, clock: Clock = utcnow):
        self.storage = storage or get_storage()
        self.clock = clock
        self.logger = get_logger(__name__)

    def _load(self) -> list[Team]:
        return self.storage.load_models(Collection.TEAMS, Team)

    def _save(self, teams: list[Team]) -> None:
        self.storage.save_models(Collection.TEAMS, teams)

    def create_team(
        self,
        owner_id: str,
        name: str,
        description: str | None = None,
    ) -> Team:
        """Create a new team.

        Args:
            owner_id: User ID of the team owner (not validated)
            name: Team name
            description: Optional team description

        Returns:
            Created team, with no members
        """
        now = self.clock()
        team = Team(
            id=generate_id(),
            owner_id=owner_id,
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )

        teams = self._load()
        teams.append(team)
        self._save(teams)

        self.logger.info(
            "team_created",
            team_id=team.id,
            owner_id=owner_id,
            name=name,
        )
        return team

    def get_team(self, team_id: str) -> Team | None:
        """Get team by ID."""
        return next((t for t in self._load() if t.id == team_id), None)

    def get_user_teams(self, user_id: str) -> list[Team]:
        """Teams the user owns or belongs to."""
        return [
            team for team in self._load()
            if team.owner_id == user_id or team.has_member(user_id)
        ]

    def add_team_member(
        self,
        team_id: str,
        user_id: str,
        role: TeamRole | str = TeamRole.MEMBER,
    ) -> Team:
        """Add a member to a team.

        Args:
            team_id: Team ID
            user_id: User to add
            role: Role to assign (default: member)

        Returns:
            Updated team

        Raises:
            NotFoundError: If the team does not exist
            AlreadyMemberError: If the user is already a member
        """
        teams = self._load()
        team = next((t for t in teams if t.id == team_id), None)

        if not team:
            raise NotFoundError("team", team_id)

        if team.has_member(user_id):
            raise AlreadyMemberError(team_id, user_id)

        now = self.clock()
        team.members.append(TeamMember(user_id=user_id, role=TeamRole(role), joined_at=now))
        team.updated_at = now
        self._save(teams)

        self.logger.info(
            "team_member_added",
            team_id=team_id,
            user_id=user_id,
            role=TeamRole(role).value,
        )
        return team

    def remove_team_member(self, team_id: str, user_id: str) -> Team:
        """Remove a member from a team.

        Raises:
            NotFoundError: If the team or the membership does not exist
        """
        teams = self._load()
        team = next((t for t in teams if t.id == team_id), None)

        if not team:
            raise NotFoundError("team", team_id)

        if not team.has_member(user_id):
            raise NotFoundError("team member", user_id)

        team.members = [m for m in team.members if m.user_id != user_id]
        team.updated_at = self.clock()
        self._save(teams)

        self.logger.info("team_member_removed", team_id=team_id, user_id=user_id)
        return team
