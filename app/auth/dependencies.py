# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and role checks.
#
# Supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# Usage:
#   from app.auth import get_current_user, require_role, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id, "role": user.role}
#
#   @router.post("/ipr/{id}/review")
#   async def review(user: AuthUser = Depends(require_role(Role.IPR_PROFESSIONAL))):
#       ...
# =============================================================================

import logging
import time
from typing import Any, Callable, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser
from core.models.users import Role
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; a missing header is answered with our own 401
security_optional = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except Exception as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys beat no keys
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        jwks = _fetch_jwks()
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def resolve_role(user_id: UUID, payload: dict[str, Any]) -> Role:
    """
    Role of the token's user.

    Prefers the app_metadata.role claim; otherwise reads users.role.
    A failed lookup counts as a plain user.
    """
    claim = (payload.get("app_metadata") or {}).get("role")
    if claim in {role.value for role in Role}:
        return Role(claim)

    try:
        return UserService.get_role(user_id)
    except Exception as e:
        logger.warning(f"Could not load role for user {user_id}: {e}")
        return Role.USER


def authenticate_token(token: str) -> AuthUser:
    """
    Verify a Supabase JWT and build the AuthUser.

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    try:
        signing_key, algorithm = _get_signing_key(token)

        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated"
        )

    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")

    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    role = resolve_role(user_uuid, payload)
    logger.debug(f"Authenticated user: {user_id} ({role.value})")
    return AuthUser(id=user_uuid, email=payload.get("email"), role=role)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> AuthUser:
    """
    Extract and validate user from Supabase JWT token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return authenticate_token(credentials.credentials)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """
    Optionally get the current user from JWT token.

    Returns None if no token is provided or it is invalid.
    """
    if credentials is None:
        return None

    try:
        return authenticate_token(credentials.credentials)
    except HTTPException:
        return None


async def get_stream_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
    token: Optional[str] = Query(default=None, description="JWT for clients that can't set headers (EventSource)"),
) -> AuthUser:
    """
    Authenticate a streaming request by Bearer header or ?token= query param.

    Raises:
        HTTPException: 401 if neither carries a valid token
    """
    raw = credentials.credentials if credentials else token
    if not raw:
        raise _unauthorized("Not authenticated")
    return authenticate_token(raw)


def require_role(*roles: Role) -> Callable:
    """
    Dependency factory: the caller must hold one of `roles`.

    Every failure (no token, bad token, wrong role) is a 401.

    Usage:
        @router.get("/admin/users")
        async def list_users(user: AuthUser = Depends(require_role(Role.ADMIN))):
            ...
    """
    allowed = set(roles)

    async def dependency(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.role not in allowed:
            logger.warning(
                f"User {user.id} with role {user.role.value} denied; "
                f"requires one of {sorted(r.value for r in allowed)}"
            )
            raise _unauthorized("Unauthorized")
        return user

    return dependency
