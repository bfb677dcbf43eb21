# =============================================================================
# core/models/notifications.py - Notification Schemas
# =============================================================================

from datetime import datetime

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    """One in-app notification."""
    id: str
    name: str
    message: str
    role: str | None = None
    read: bool = False
    created_at: datetime | None = None


class NotificationList(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
