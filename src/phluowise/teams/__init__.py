"""Teams module for Phluowise.

Groups referrers under an owner with role-tagged members.
"""

from phluowise.teams.models import Team, TeamMember, TeamRole
from phluowise.teams.service import TeamService

__all__ = ["Team", "TeamMember", "TeamRole", "TeamService"]
