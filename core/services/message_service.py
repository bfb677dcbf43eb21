# =============================================================================
# core/services/message_service.py - Direct Messages
# =============================================================================
# Messages between two users share a chat_id (both user ids, sorted). Reads
# are ordered by (created_at, id) so that polling with `after` and SSE
# replay with Last-Event-ID never reorder or repeat a message.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.messages import chat_id as make_chat_id
from lib.messages import chat_participants, merge_messages, message_sort_key
from lib.supabase_client import SupabaseClient
from core.services.user_service import UserService
from app.config import settings
from app.exceptions import ChatAccessDeniedError, InvalidRecipientError
from app.streaming.broadcast import publish_chat_message

logger = logging.getLogger(__name__)

TABLE = "messages"


class MessageService:
    """
    Service for direct messages.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def send(sender_id: UUID | str, receiver_id: UUID | str, content: str) -> dict[str, Any]:
        """
        Store a message and publish it to the chat's stream.

        Returns:
            Created message with `sender` public fields

        Raises:
            InvalidRecipientError: If the receiver is the sender or doesn't exist
        """
        sender_str, receiver_str = str(sender_id), str(receiver_id)

        if sender_str == receiver_str:
            raise InvalidRecipientError(receiver_str, "cannot message yourself")
        if not UserService.get_user(receiver_str):
            raise InvalidRecipientError(receiver_str, "user does not exist")

        message = SupabaseClient.insert(TABLE, {
            "sender_id": sender_str,
            "receiver_id": receiver_str,
            "content": content,
            "chat_id": make_chat_id(sender_str, receiver_str),
        })
        message["sender"] = UserService.get_summaries([sender_str]).get(sender_str)

        logger.info(f"Message {message['id']} sent in chat {message['chat_id']}")
        publish_chat_message(message)
        return message

    @staticmethod
    def list_chat(
        chat: str,
        after: str | None = None,
        inclusive: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Messages of a chat in (created_at, id) order.

        Args:
            chat: Chat id
            after: Only messages created after this ISO timestamp
            inclusive: Include messages created exactly at `after`
            limit: Maximum rows (defaults to MESSAGE_POLL_LIMIT)

        Returns:
            Messages with `sender` public fields
        """
        client = SupabaseClient.get_client()
        limit = limit or settings.MESSAGE_POLL_LIMIT

        try:
            query = client.table(TABLE).select("*").eq("chat_id", chat)
            if after:
                query = query.gte("created_at", after) if inclusive else query.gt("created_at", after)
            response = (
                query.order("created_at")
                .order("id")
                .limit(limit)
                .execute()
            )
            messages = response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch messages for chat {chat}: {e}")
            raise

        senders = UserService.get_summaries(m["sender_id"] for m in messages)
        for message in messages:
            message["sender"] = senders.get(str(message["sender_id"]))
        return messages

    @staticmethod
    def conversation(
        user_id: UUID | str,
        other_user_id: UUID | str,
        after: str | None = None,
    ) -> list[dict[str, Any]]:
        """Messages between the caller and another user."""
        return MessageService.list_chat(make_chat_id(str(user_id), str(other_user_id)), after=after)

    @staticmethod
    def replay_after_event(chat: str, last_event_id: str) -> list[dict[str, Any]]:
        """
        Messages strictly after the message `last_event_id` in (created_at, id) order.

        An id that isn't a message of this chat (or isn't a UUID) replays nothing.
        """
        try:
            cursor_id = str(UUID(last_event_id))
        except ValueError:
            logger.debug(f"Ignoring malformed Last-Event-ID {last_event_id!r} for chat {chat}")
            return []

        cursor = SupabaseClient.fetch_by_id(TABLE, cursor_id)
        if not cursor or cursor.get("chat_id") != chat:
            logger.debug(f"Unknown Last-Event-ID {last_event_id} for chat {chat}")
            return []

        cursor_key = message_sort_key(cursor)
        candidates = MessageService.list_chat(chat, after=cursor["created_at"], inclusive=True)
        return [m for m in candidates if message_sort_key(m) > cursor_key]

    @staticmethod
    def stream_backlog(
        chat: str,
        after: str | None = None,
        last_event_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """Messages a (re)connecting stream replays: after `after` and/or after Last-Event-ID."""
        backlog: list[dict[str, Any]] = []
        if after:
            backlog = MessageService.list_chat(chat, after=after)
        if last_event_id:
            backlog = merge_messages(backlog, MessageService.replay_after_event(chat, last_event_id))
        return backlog

    @staticmethod
    def require_participant(chat: str, user_id: UUID | str) -> tuple[str, str]:
        """
        Participants of a chat, checking the caller is one of them.

        Raises:
            ChatAccessDeniedError: If the chat id is malformed or the caller isn't in it
        """
        participants = chat_participants(chat)
        if participants is None or str(user_id) not in participants:
            raise ChatAccessDeniedError(chat)
        return participants
