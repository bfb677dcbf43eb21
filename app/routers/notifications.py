# =============================================================================
# app/routers/notifications.py - Notification Endpoints
# =============================================================================
# The caller's in-app notifications. New ones are also pushed live on
# GET /notifications/stream (see app/streaming/routes.py).
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from core.models.notifications import NotificationList, NotificationResponse
from core.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationList)
async def list_notifications(
    user: AuthUser = Depends(get_current_user),
    unread_only: Annotated[bool, Query(description="Only unread notifications")] = False,
    limit: Annotated[int, Query(ge=1, le=200, description="Maximum notifications")] = 50,
):
    """The caller's notifications, newest first, with the unread count."""
    notifications, unread = NotificationService.list_for_user(user.id, unread_only, limit)
    return NotificationList(
        notifications=[NotificationResponse(**n) for n in notifications],
        unread_count=unread,
    )


@router.post("/read-all")
async def mark_all_read(user: AuthUser = Depends(get_current_user)):
    """Mark all of the caller's notifications as read."""
    updated = NotificationService.mark_all_read(user.id)
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: Annotated[UUID, Path(description="Notification UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Mark one notification as read.

    Raises:
        404: Notification not found (or not the caller's)
    """
    return NotificationResponse(**NotificationService.mark_read(str(notification_id), user.id))
