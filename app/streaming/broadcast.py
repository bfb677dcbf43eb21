# =============================================================================
# app/streaming/broadcast.py - Cross-Process Event Publishing
# =============================================================================
# Any process (API worker or Celery worker) publishes events to one Redis
# pub/sub channel; every API process listens to it and forwards each event
# to its own SSE subscribers (see app/main.py).
#
# Events:
#   - message: A chat message was stored
#   - notification: A notification was created for a user
#   - ipr_decision_recorded: The ledger confirmed a review decision
#   - ipr_decision_failed: The ledger call failed; the filing is Pending again
# =============================================================================

import json
import logging
from typing import Any

from app.streaming.manager import chat_channel, user_channel

logger = logging.getLogger(__name__)

# Redis channel carrying all stream events
STREAM_CHANNEL = "innovatehub:stream:events"


def get_redis_client():
    """Get a Redis client for pub/sub operations."""
    import redis
    from app.config import settings
    return redis.from_url(settings.REDIS_URL)


def publish_event(channel: str, event_type: str, data: dict[str, Any]) -> bool:
    """
    Publish an event for the subscribers of `channel`.

    Publishing is best effort: the data is already stored, and clients
    that miss an event catch up by polling.

    Args:
        channel: Stream channel (chat:<id> or user:<id>)
        event_type: Event type
        data: Event payload

    Returns:
        bool: True if published successfully
    """
    try:
        client = get_redis_client()

        message = json.dumps({
            "channel": channel,
            "type": event_type,
            **data
        }, default=str)

        client.publish(STREAM_CHANNEL, message)

        logger.debug(f"Published {event_type} event to {channel}")
        return True

    except Exception as e:
        logger.error(f"Failed to publish event: {e}")
        return False


def publish_chat_message(message: dict[str, Any]) -> bool:
    """Publish a stored chat message to its chat's subscribers."""
    return publish_event(
        channel=chat_channel(message["chat_id"]),
        event_type="message",
        data={"message": message},
    )


def publish_notification(notification: dict[str, Any]) -> bool:
    """Publish a new notification to its recipient."""
    return publish_event(
        channel=user_channel(str(notification["user_id"])),
        event_type="notification",
        data={"notification": notification},
    )


def publish_ipr_decision_recorded(
    user_id: str,
    filing_id: str,
    status: str,
    transaction_hash: str,
    explorer_url: str | None = None,
) -> bool:
    """
    Publish an ipr_decision_recorded event.

    Called when the ledger transaction for a review decision is mined.
    """
    return publish_event(
        channel=user_channel(user_id),
        event_type="ipr_decision_recorded",
        data={
            "filing_id": filing_id,
            "status": status,
            "transaction_hash": transaction_hash,
            "explorer_url": explorer_url,
        }
    )


def publish_ipr_decision_failed(
    user_id: str,
    filing_id: str,
    error: str,
) -> bool:
    """
    Publish an ipr_decision_failed event.

    Called when the ledger call fails and the filing has been reset to Pending.
    """
    return publish_event(
        channel=user_channel(user_id),
        event_type="ipr_decision_failed",
        data={
            "filing_id": filing_id,
            "error": error,
        }
    )
