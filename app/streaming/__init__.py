# =============================================================================
# app/streaming/__init__.py - Server-Sent Events Module
# =============================================================================
# Provides real-time chat messages and user events over SSE.
#
# Usage:
#   # Forward an event to local subscribers (from FastAPI)
#   from app.streaming import stream_manager
#
#   await stream_manager.broadcast("chat:a_b", {"type": "message", ...})
#
#   # Publish events from any process
#   from app.streaming.broadcast import publish_chat_message
#
#   publish_chat_message(message)
# =============================================================================

from app.streaming.manager import stream_manager, chat_channel, user_channel
from app.streaming.broadcast import (
    publish_event,
    publish_chat_message,
    publish_notification,
    publish_ipr_decision_recorded,
    publish_ipr_decision_failed,
    STREAM_CHANNEL,
)

__all__ = [
    "stream_manager",
    "chat_channel",
    "user_channel",
    "publish_event",
    "publish_chat_message",
    "publish_notification",
    "publish_ipr_decision_recorded",
    "publish_ipr_decision_failed",
    "STREAM_CHANNEL",
]
