# =============================================================================
# core/services/notification_service.py - In-App Notifications
# =============================================================================
# Every review outcome (form approved/rejected, filing decided, funding
# request answered) leaves a notification for the affected user.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from app.exceptions import RecordNotFoundError
from app.streaming.broadcast import publish_notification

logger = logging.getLogger(__name__)

TABLE = "notifications"


class NotificationService:
    """Service for creating and reading notifications."""

    @staticmethod
    def add(
        user_id: UUID | str,
        name: str,
        message: str,
        role: str | None = None,
    ) -> dict[str, Any]:
        """
        Create an unread notification.

        Args:
            user_id: Recipient
            name: Short title shown in the bell menu
            message: Body text
            role: Role the notification concerns (for client routing)

        Returns:
            Created notification dict
        """
        notification = SupabaseClient.insert(TABLE, {
            "user_id": str(user_id),
            "name": name,
            "message": message,
            "role": role,
            "read": False,
        })
        logger.info(f"Notified user {user_id}: {name}")
        publish_notification(notification)
        return notification

    @staticmethod
    def list_for_user(
        user_id: UUID | str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Newest notifications for a user.

        Returns:
            Tuple of (notifications, unread count)
        """
        filters: dict[str, Any] = {"user_id": str(user_id)}
        if unread_only:
            filters["read"] = False

        notifications = SupabaseClient.fetch_many(TABLE, filters=filters, desc=True, limit=limit)
        unread = SupabaseClient.count(TABLE, {"user_id": str(user_id), "read": False})
        return notifications, unread

    @staticmethod
    def mark_read(notification_id: str, user_id: UUID | str) -> dict[str, Any]:
        """
        Mark one of the user's notifications as read.

        Raises:
            RecordNotFoundError: If the notification doesn't exist or isn't the user's
        """
        updated = SupabaseClient.update_where(
            TABLE, notification_id, {"user_id": str(user_id)}, {"read": True}
        )
        if updated is None:
            raise RecordNotFoundError("Notification", notification_id)
        return updated

    @staticmethod
    def mark_all_read(user_id: UUID | str) -> int:
        """
        Mark every unread notification of the user as read.

        Returns:
            Number of notifications updated
        """
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table(TABLE)
                .update({"read": True})
                .eq("user_id", str(user_id))
                .eq("read", False)
                .execute()
            )
            return len(response.data or [])

        except Exception as e:
            logger.error(f"Failed to mark notifications read: {e}")
            raise
