# =============================================================================
# core/models/users.py - User & Role Schemas
# =============================================================================
# Roles decide which endpoints a user can reach. A user starts as "user";
# an approved onboarding form promotes them to that form's role, and admins
# can promote/demote policy makers directly.
#
# Each non-admin role has a profile table keyed by user_id that holds the
# approved form's data.
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Platform roles (values match the stored users.role column)."""
    USER = "user"
    ADMIN = "admin"
    RESEARCHER = "researcher"
    STARTUP = "startup"
    IPR_PROFESSIONAL = "iprProfessional"
    POLICY_MAKER = "policyMaker"
    FUNDING_AGENCY = "fundingAgency"
    MENTOR = "mentor"


# Higher level = more access. has_access() compares levels.
ROLE_ACCESS_LEVELS: dict[Role, int] = {
    Role.ADMIN: 100,
    Role.RESEARCHER: 50,
    Role.STARTUP: 50,
    Role.IPR_PROFESSIONAL: 50,
    Role.POLICY_MAKER: 50,
    Role.FUNDING_AGENCY: 50,
    Role.MENTOR: 50,
    Role.USER: 10,
}

# Role -> profile table holding the approved form data
PROFILE_TABLES: dict[Role, str] = {
    Role.STARTUP: "startups",
    Role.RESEARCHER: "researchers",
    Role.IPR_PROFESSIONAL: "ipr_professionals",
    Role.POLICY_MAKER: "policy_makers",
    Role.FUNDING_AGENCY: "funding_agencies",
    Role.MENTOR: "mentors",
}


def parse_role(value: str | None) -> Role:
    """Map a stored role string to Role, defaulting to USER for unknown values."""
    try:
        return Role(value)
    except ValueError:
        return Role.USER


def has_access(user_role: Role | str, required_role: Role | str) -> bool:
    """
    True if user_role's access level is at least required_role's.

    Example:
        has_access(Role.ADMIN, Role.STARTUP)  # True
        has_access(Role.USER, Role.STARTUP)   # False
    """
    return ROLE_ACCESS_LEVELS[parse_role(user_role)] >= ROLE_ACCESS_LEVELS[parse_role(required_role)]


class UserSummary(BaseModel):
    """Public fields of a user (message picker, sender info)."""
    id: UUID
    name: str | None = None
    image: str | None = None
    role: Role = Role.USER


class UserRecord(UserSummary):
    """Full users row, visible to the user themselves and admins."""
    email: str | None = None
    created_at: datetime | None = None


class RoleUpdateRequest(BaseModel):
    """
    Admin role change.

    Only policy maker promotion and demotion back to user are done here;
    every other role comes from an approved onboarding form.
    """
    role: Role = Field(..., description="'policyMaker' or 'user'")
