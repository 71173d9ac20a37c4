"""
Tests for teams and memberships.

Covers:
- Team creation
- Adding members (duplicate and missing team)
- Removing members
- Looking up a user's teams
"""

import pytest

from phluowise.errors import AlreadyMemberError, NotFoundError
from phluowise.teams.models import TeamRole


class TestTeamMembers:
    """Test membership changes."""

    def test_create_team(self, teams, clock):
        """A new team has its owner and no members."""
        team = teams.create_team("owner", "Alpha", "Top referrers")

        assert team.owner_id == "owner"
        assert team.members == []
        assert teams.get_team(team.id).name == "Alpha"

    def test_add_member(self, teams, clock):
        """Members get a role and join time."""
        team = teams.create_team("owner", "Alpha")
        clock.advance(minutes=1)

        updated = teams.add_team_member(team.id, "u1", TeamRole.ADMIN)

        assert len(updated.members) == 1
        assert updated.members[0].user_id == "u1"
        assert updated.members[0].role == TeamRole.ADMIN
        assert updated.members[0].joined_at == clock.now
        assert updated.updated_at == clock.now

    def test_default_role_is_member(self, teams):
        """Role defaults to member."""
        team = teams.create_team("owner", "Alpha")

        updated = teams.add_team_member(team.id, "u1")

        assert updated.members[0].role == TeamRole.MEMBER

    def test_add_same_member_twice(self, teams):
        """Second add raises and leaves members unchanged."""
        team = teams.create_team("owner", "Alpha")
        teams.add_team_member(team.id, "u1")

        with pytest.raises(AlreadyMemberError):
            teams.add_team_member(team.id, "u1", "admin")

        assert len(teams.get_team(team.id).members) == 1

    def test_add_member_to_missing_team(self, teams):
        """Unknown team raises NotFoundError."""
        with pytest.raises(NotFoundError):
            teams.add_team_member("missing", "u1")

    def test_remove_member(self, teams):
        """Removed user is no longer listed."""
        team = teams.create_team("owner", "Alpha")
        teams.add_team_member(team.id, "u1")
        teams.add_team_member(team.id, "u2")

        updated = teams.remove_team_member(team.id, "u1")

        assert [m.user_id for m in updated.members] == ["u2"]

    def test_remove_non_member(self, teams):
        """Removing a non-member raises NotFoundError."""
        team = teams.create_team("owner", "Alpha")

        with pytest.raises(NotFoundError):
            teams.remove_team_member(team.id, "u1")


class TestUserTeams:
    """Test team lookup for a user."""

    def test_owner_and_member_matches(self, teams):
        """Owned teams and joined teams are both returned."""
        owned = teams.create_team("u1", "Owned")
        joined = teams.create_team("u2", "Joined")
        teams.create_team("u3", "Other")
        teams.add_team_member(joined.id, "u1")

        result = teams.get_user_teams("u1")

        assert [t.id for t in result] == [owned.id, joined.id]

    def test_no_teams(self, teams):
        """A user with no teams gets an empty list."""
        teams.create_team("u2", "Other")

        assert teams.get_user_teams("u1") == []
