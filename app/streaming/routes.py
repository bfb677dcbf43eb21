# =============================================================================
# app/streaming/routes.py - Stream Routes
# =============================================================================
# Per-user event stream and subscriber statistics. The chat stream lives
# with the other message endpoints (GET /messages/stream).
#
# Events on the user stream:
#   - {"type": "notification", "notification": {...}}
#   - {"type": "ipr_decision_recorded", "filing_id": "...", "transaction_hash": "..."}
#   - {"type": "ipr_decision_failed", "filing_id": "...", "error": "..."}
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request

from app.auth import get_stream_user, AuthUser
from app.streaming.manager import stream_manager, user_channel
from app.streaming.sse import sse_response, stream_events

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/notifications/stream")
async def notification_stream(
    request: Request,
    user: AuthUser = Depends(get_stream_user),
):
    """
    Server-sent events for the caller: notifications and IP filing updates.

    Authenticate with the Authorization header, or ?token= for EventSource.
    """
    channel = user_channel(str(user.id))
    logger.info(f"User {user.id} opened notification stream")
    return sse_response(stream_events(request, channel))


@router.get("/stream/status")
async def stream_status():
    """
    Get stream subscriber statistics.

    Returns:
        dict: Subscriber counts per channel
    """
    channels = stream_manager.get_active_channels()
    return {
        "total_subscribers": stream_manager.get_subscriber_count(),
        "channels": {
            channel: stream_manager.get_subscriber_count(channel) for channel in channels
        },
        "channel_count": len(channels),
    }
