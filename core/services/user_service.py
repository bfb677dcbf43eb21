# =============================================================================
# core/services/user_service.py - Users, Roles & Profiles
# =============================================================================
# Looks up users and the role profile rows that hang off them. Profiles are
# resolved by a separate lookup on <profile table>.user_id, never a join.
# =============================================================================

import logging
from typing import Any, Iterable
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.models.users import PROFILE_TABLES, Role, parse_role
from app.exceptions import (
    InvalidRoleChangeError,
    ProfileNotFoundError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = "id, name, image, role"


class UserService:
    """
    Service for user and profile lookups.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def get_user(user_id: UUID | str) -> dict[str, Any] | None:
        """Fetch a users row, or None."""
        return SupabaseClient.fetch_by_id("users", str(user_id))

    @staticmethod
    def get_role(user_id: UUID | str) -> Role:
        """Stored role of a user; unknown users and values count as Role.USER."""
        user = SupabaseClient.fetch_by_id("users", str(user_id), columns="id, role")
        return parse_role(user.get("role") if user else None)

    @staticmethod
    def get_public_user(user_id: UUID | str) -> dict[str, Any]:
        """
        Public fields of a user.

        Raises:
            RecordNotFoundError: If the user doesn't exist
        """
        user = SupabaseClient.fetch_by_id("users", str(user_id), columns=PUBLIC_COLUMNS)
        if not user:
            raise RecordNotFoundError("User", str(user_id))
        return user

    @staticmethod
    def get_summaries(user_ids: Iterable[UUID | str]) -> dict[str, dict[str, Any]]:
        """
        Public fields for several users in one query.

        Returns:
            Mapping of user id -> public fields (missing ids are omitted)
        """
        ids = sorted({str(user_id) for user_id in user_ids if user_id})
        if not ids:
            return {}
        rows = SupabaseClient.fetch_many(
            "users", filters={"id": ids}, columns=PUBLIC_COLUMNS, order_by=None
        )
        return {str(row["id"]): row for row in rows}

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @staticmethod
    def get_profile(user_id: UUID | str, role: Role) -> dict[str, Any] | None:
        """The user's profile row for a role, or None (admins and plain users have none)."""
        table = PROFILE_TABLES.get(role)
        if table is None:
            return None
        return SupabaseClient.fetch_one(table, {"user_id": str(user_id)})

    @staticmethod
    def require_profile(user_id: UUID | str, role: Role) -> dict[str, Any]:
        """
        The user's profile row for a role.

        Raises:
            ProfileNotFoundError: If the user has no profile for that role
        """
        profile = UserService.get_profile(user_id, role)
        if not profile:
            raise ProfileNotFoundError(role.value, str(user_id))
        return profile

    @staticmethod
    def get_me(user_id: UUID | str, role: Role) -> dict[str, Any]:
        """The caller's users row plus their role profile (if any)."""
        user = UserService.get_user(user_id) or {"id": str(user_id), "role": role.value}
        return {
            "user": user,
            "profile": UserService.get_profile(user_id, role),
        }

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    @staticmethod
    def list_available(
        user_id: UUID | str,
        role: Role | None = None,
    ) -> list[dict[str, Any]]:
        """
        Users the caller can start a chat with (everyone but themselves).
        """
        filters = {"role": role.value} if role else None
        users = SupabaseClient.fetch_many(
            "users", filters=filters, columns=PUBLIC_COLUMNS, order_by="name"
        )
        return [u for u in users if str(u["id"]) != str(user_id)]

    @staticmethod
    def list_users(
        role: Role | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Admin listing with pagination.

        Returns:
            Tuple of (users list, total count)
        """
        filters = {"role": role.value} if role else None
        users = SupabaseClient.fetch_many(
            "users",
            filters=filters,
            desc=True,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
        total = SupabaseClient.count("users", filters)
        return users, total

    # -------------------------------------------------------------------------
    # Role Changes
    # -------------------------------------------------------------------------

    @staticmethod
    def set_role(user_id: UUID | str, role: Role) -> dict[str, Any]:
        """
        Set users.role.

        Raises:
            RecordNotFoundError: If the user doesn't exist
        """
        updated = SupabaseClient.update("users", str(user_id), {"role": role.value})
        if not updated:
            raise RecordNotFoundError("User", str(user_id))
        logger.info(f"Set role of user {user_id} to {role.value}")
        return updated

    @staticmethod
    def change_policy_maker_role(user_id: UUID | str, role: Role) -> dict[str, Any]:
        """
        Admin promotion to policy maker, or demotion back to user.

        Promotion creates the policy_makers profile; demotion deletes it.

        Raises:
            RecordNotFoundError: If the user doesn't exist
            InvalidRoleChangeError: If the role isn't policyMaker/user, or the
                user is already (or is not) a policy maker
        """
        user = UserService.get_user(user_id)
        if not user:
            raise RecordNotFoundError("User", str(user_id))

        user_id_str = str(user_id)
        current = parse_role(user.get("role"))
        table = PROFILE_TABLES[Role.POLICY_MAKER]

        if role == Role.POLICY_MAKER:
            if current == Role.POLICY_MAKER:
                raise InvalidRoleChangeError("User is already a policy maker", user_id_str, role.value)
            if current != Role.USER:
                raise InvalidRoleChangeError(
                    f"User already holds the {current.value} role", user_id_str, role.value
                )
            SupabaseClient.insert(table, {
                "user_id": user_id_str,
                "name": user.get("name"),
                "email": user.get("email"),
                "details": {},
            })

        elif role == Role.USER:
            if current != Role.POLICY_MAKER:
                raise InvalidRoleChangeError("User is not a policy maker", user_id_str, role.value)
            profile = SupabaseClient.fetch_one(table, {"user_id": user_id_str})
            if profile:
                SupabaseClient.delete(table, profile["id"])

        else:
            raise InvalidRoleChangeError(
                f"Role '{role.value}' cannot be assigned by an admin", user_id_str, role.value
            )

        return UserService.set_role(user_id_str, role)
