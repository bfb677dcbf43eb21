# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, ConfigDict
from uuid import UUID
from typing import Any, Optional

from core.models.users import Role


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    The role comes from the token's app_metadata when the identity
    provider sets it, otherwise from the users table.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    role: Role = Role.USER


class MeResponse(BaseModel):
    """Caller's users row plus their role profile (None for plain users/admins)."""
    id: UUID
    email: Optional[str] = None
    role: Role
    user: dict[str, Any]
    profile: Optional[dict[str, Any]] = None


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    app_metadata: dict[str, Any] = {}
