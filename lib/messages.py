# =============================================================================
# lib/messages.py - Chat Message Helpers
# =============================================================================
# Pure helpers shared by the message service, the stream endpoint and tests:
# - chat_id(): stable conversation key for two users
# - merge_messages(): combine polled and pushed messages without duplicates
# - format_sse(): encode one server-sent event
#
# Messages are totally ordered by (created_at, id). Every message a client
# sees carries its id, so the same message arriving via a poll and via the
# push stream collapses to one entry.
# =============================================================================

from __future__ import annotations

import json
from typing import Any, Iterable

CHAT_ID_SEPARATOR = "_"


def chat_id(user_a: str, user_b: str) -> str:
    """
    Conversation key for two users: both ids sorted, joined with '_'.

    Example:
        chat_id("b-user", "a-user")  # "a-user_b-user"
    """
    return CHAT_ID_SEPARATOR.join(sorted([str(user_a), str(user_b)]))


def chat_participants(chat: str) -> tuple[str, str] | None:
    """
    Split a chat id back into its two participant ids.

    Returns None for malformed ids. User ids are UUIDs (no '_'), so the
    separator splits unambiguously.
    """
    parts = chat.split(CHAT_ID_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]


def message_sort_key(message: dict[str, Any]) -> tuple[str, str]:
    """Total order for messages: creation time, then id as tie-breaker."""
    return (str(message.get("created_at") or ""), str(message.get("id") or ""))


def merge_messages(
    existing: Iterable[dict[str, Any]],
    incoming: Iterable[dict[str, Any]],
) -> list[dict[str, Any]]:
    """
    Merge two batches of messages, dropping duplicate ids.

    When the same id appears in both, the incoming copy wins (it is the
    newer read of the row). Output is sorted by (created_at, id).
    """
    by_id: dict[str, dict[str, Any]] = {}
    for message in existing:
        by_id[str(message["id"])] = message
    for message in incoming:
        by_id[str(message["id"])] = message
    return sorted(by_id.values(), key=message_sort_key)


def format_sse(data: dict[str, Any], event_id: str | None = None, event: str | None = None) -> str:
    """
    Encode one server-sent event.

    Example:
        format_sse({"type": "message"}, event_id="42")
        # 'id: 42\\ndata: {"type": "message"}\\n\\n'
    """
    lines = []
    if event_id:
        lines.append(f"id: {event_id}")
    if event:
        lines.append(f"event: {event}")
    lines.append(f"data: {json.dumps(data, default=str)}")
    return "\n".join(lines) + "\n\n"
