# =============================================================================
# tests/test_messages.py - Messaging Tests
# =============================================================================
# Tests for chat ids, message merging, SSE framing, the stream manager,
# the SSE generator and the message service.
#
# Run with: pytest tests/test_messages.py -v
# =============================================================================

import asyncio
import json
from unittest.mock import patch

import pytest

from app.exceptions import ChatAccessDeniedError, InvalidRecipientError
from app.streaming.manager import QUEUE_SIZE, STREAM_CLOSED, StreamManager, chat_channel, user_channel
from app.streaming.sse import KEEPALIVE, stream_events
from app.streaming import sse
from core.services.message_service import MessageService
from lib.messages import (
    chat_id,
    chat_participants,
    format_sse,
    merge_messages,
    message_sort_key,
)

from tests.conftest import OTHER_USER_ID, USER_ID

MESSAGE_IDS = [f"00000000-0000-0000-0000-{n:012d}" for n in range(10)]


def message(message_id: str, created_at: str, content: str = "hi") -> dict:
    return {
        "id": message_id,
        "sender_id": USER_ID,
        "receiver_id": OTHER_USER_ID,
        "content": content,
        "chat_id": chat_id(USER_ID, OTHER_USER_ID),
        "created_at": created_at,
    }


class FakeRequest:
    """Stands in for a Starlette request; disconnects after N checks."""

    def __init__(self, connected_checks: int):
        self.remaining = connected_checks

    async def is_disconnected(self) -> bool:
        if self.remaining <= 0:
            return True
        self.remaining -= 1
        return False


# =============================================================================
# Chat Ids
# =============================================================================

class TestChatId:
    """Tests for conversation keys."""

    def test_order_independent(self):
        """Test that both participants compute the same chat id."""
        assert chat_id("b-user", "a-user") == chat_id("a-user", "b-user") == "a-user_b-user"

    def test_participants_round(self):
        assert chat_participants(chat_id(USER_ID, OTHER_USER_ID)) == (USER_ID, OTHER_USER_ID)

    def test_malformed_chat_id(self):
        assert chat_participants("no-separator") is None
        assert chat_participants("a_b_c") is None
        assert chat_participants("_b") is None


# =============================================================================
# Merging & Ordering
# =============================================================================

class TestMergeMessages:
    """Tests for combining polled and pushed messages."""

    def test_duplicates_collapse(self):
        """Test that the same id arriving via poll and push appears once."""
        polled = [message("1", "2024-01-01T10:00:00"), message("2", "2024-01-01T10:01:00")]
        pushed = [message("2", "2024-01-01T10:01:00"), message("3", "2024-01-01T10:02:00")]

        merged = merge_messages(polled, pushed)

        assert [m["id"] for m in merged] == ["1", "2", "3"]

    def test_incoming_copy_wins(self):
        merged = merge_messages(
            [message("1", "2024-01-01T10:00:00", "old")],
            [message("1", "2024-01-01T10:00:00", "new")],
        )
        assert merged[0]["content"] == "new"

    def test_same_timestamp_ordered_by_id(self):
        """Test the (created_at, id) tie-break."""
        merged = merge_messages(
            [message("b", "2024-01-01T10:00:00")],
            [message("a", "2024-01-01T10:00:00")],
        )
        assert [m["id"] for m in merged] == ["a", "b"]

    def test_sort_key(self):
        assert message_sort_key({"created_at": "t", "id": 5}) == ("t", "5")


class TestFormatSse:
    def test_with_id(self):
        frame = format_sse({"type": "message"}, event_id="42")

        assert frame == 'id: 42\ndata: {"type": "message"}\n\n'

    def test_with_event_name(self):
        frame = format_sse({"a": 1}, event="notification")

        assert frame.startswith("event: notification\n")
        assert frame.endswith("\n\n")


# =============================================================================
# Stream Manager
# =============================================================================

class TestStreamManager:
    """Tests for subscriber bookkeeping and fan-out."""

    def test_channels(self):
        assert chat_channel("a_b") == "chat:a_b"
        assert user_channel("u1") == "user:u1"

    def test_broadcast_reaches_every_subscriber(self):
        async def run():
            manager = StreamManager()
            first = manager.subscribe("chat:x")
            second = manager.subscribe("chat:x")

            sent = await manager.broadcast("chat:x", {"type": "message"})

            return sent, first.get_nowait(), second.get_nowait(), manager

        sent, first_event, second_event, manager = asyncio.run(run())

        assert sent == 2
        assert first_event == second_event == {"type": "message"}
        assert manager.get_subscriber_count("chat:x") == 2

    def test_broadcast_without_subscribers(self):
        manager = StreamManager()
        assert asyncio.run(manager.broadcast("chat:none", {"type": "message"})) == 0

    def test_unsubscribe_removes_channel(self):
        async def run():
            manager = StreamManager()
            queue = manager.subscribe("user:1")
            manager.unsubscribe("user:1", queue)
            manager.unsubscribe("user:1", queue)
            return manager

        manager = asyncio.run(run())

        assert manager.get_active_channels() == []
        assert manager.get_subscriber_count() == 0

    def test_full_queue_dropped(self):
        """Test that a subscriber that stopped reading is dropped and told to close."""
        async def run():
            manager = StreamManager()
            queue = manager.subscribe("chat:slow")
            while not queue.full():
                queue.put_nowait({"type": "filler"})
            sent = await manager.broadcast("chat:slow", {"type": "message"})
            return sent, manager, queue

        sent, manager, queue = asyncio.run(run())

        assert sent == 0
        assert manager.get_subscriber_count("chat:slow") == 0
        assert queue.qsize() == 1
        assert queue.get_nowait() is STREAM_CLOSED


# =============================================================================
# SSE Generator
# =============================================================================

class TestStreamEvents:
    """Tests for the SSE frame generator."""

    def test_replay_live_dedupe_and_keepalive(self):
        """
        Replayed messages are sent first; a live copy of a replayed message
        is skipped; a quiet channel produces a keepalive comment.
        """
        channel = "chat:test-replay"
        replayed = message("m1", "2024-01-01T10:00:00")
        live = message("m2", "2024-01-01T10:01:00")

        async def run():
            gen = stream_events(FakeRequest(3), channel, replay=lambda: [replayed], keepalive=0.01)
            frames = [await gen.__anext__()]

            await sse.stream_manager.broadcast(channel, {"type": "message", "message": replayed})
            await sse.stream_manager.broadcast(channel, {"type": "message", "message": live})

            async for frame in gen:
                frames.append(frame)
            return frames

        frames = asyncio.run(run())

        assert frames[0] == ": connected\n\n"
        assert frames[1].startswith("id: m1\n")
        assert frames[2].startswith("id: m2\n")
        assert frames[3] == KEEPALIVE
        assert len(frames) == 4
        assert sse.stream_manager.get_subscriber_count(channel) == 0

    def test_non_message_events_have_no_id(self):
        channel = "user:test-notify"

        async def run():
            gen = stream_events(FakeRequest(1), channel, keepalive=5)
            frames = [await gen.__anext__()]
            await sse.stream_manager.broadcast(channel, {"type": "notification", "notification": {"name": "x"}})
            async for frame in gen:
                frames.append(frame)
            return frames

        frames = asyncio.run(run())

        assert frames[1].startswith("data: ")
        assert json.loads(frames[1][len("data: "):])["type"] == "notification"

    def test_backlog_loaded_after_subscribing(self):
        """Test that a message published while the backlog loads is still streamed."""
        channel = "chat:test-backlog"
        stored = message("m1", "2024-01-01T10:00:00")
        published_meanwhile = message("m2", "2024-01-01T10:00:01")
        subscribers_at_load = []

        def load_backlog():
            subscribers_at_load.append(sse.stream_manager.get_subscriber_count(channel))
            return [stored]

        async def run():
            gen = stream_events(FakeRequest(1), channel, replay=load_backlog, keepalive=5)
            frames = [await gen.__anext__()]
            await sse.stream_manager.broadcast(channel, {"type": "message", "message": published_meanwhile})
            async for frame in gen:
                frames.append(frame)
            return frames

        frames = asyncio.run(run())

        assert subscribers_at_load == [1]
        assert frames[1].startswith("id: m1\n")
        assert frames[2].startswith("id: m2\n")

    def test_dropped_subscriber_ends_stream(self):
        """Test that a stream which fell behind ends instead of idling on keepalives."""
        channel = "chat:test-overflow"

        async def run():
            gen = stream_events(FakeRequest(10), channel, keepalive=0.01)
            frames = [await gen.__anext__()]

            # The client is not reading: the last broadcast overflows its queue
            for n in range(QUEUE_SIZE + 1):
                await sse.stream_manager.broadcast(channel, {"type": "message", "message": {"id": f"m{n}"}})

            async for frame in gen:
                frames.append(frame)
            late = await sse.stream_manager.broadcast(channel, {"type": "message", "message": {"id": "late"}})
            return frames, late

        frames, late = asyncio.run(run())

        assert frames == [": connected\n\n"]
        assert KEEPALIVE not in frames
        assert late == 0
        assert sse.stream_manager.get_subscriber_count(channel) == 0


# =============================================================================
# Message Service
# =============================================================================

class TestMessageService:
    """Tests for MessageService with the database mocked."""

    def test_cannot_message_self(self):
        with pytest.raises(InvalidRecipientError):
            MessageService.send(USER_ID, USER_ID, "hello me")

    @patch("core.services.message_service.UserService")
    def test_unknown_receiver(self, mock_users):
        mock_users.get_user.return_value = None

        with pytest.raises(InvalidRecipientError) as exc_info:
            MessageService.send(USER_ID, OTHER_USER_ID, "hi")

        assert exc_info.value.status_code == 400

    @patch("core.services.message_service.publish_chat_message")
    @patch("core.services.message_service.SupabaseClient")
    @patch("core.services.message_service.UserService")
    def test_send_stores_and_publishes(self, mock_users, mock_db, mock_publish):
        """Test that a sent message is stored with its chat id and published."""
        mock_users.get_user.return_value = {"id": OTHER_USER_ID}
        mock_users.get_summaries.return_value = {OTHER_USER_ID: {"id": OTHER_USER_ID, "name": "Ravi"}}
        mock_db.insert.side_effect = lambda table, data: {
            **data, "id": "m1", "created_at": "2024-01-01T10:00:00"
        }

        sent = MessageService.send(OTHER_USER_ID, USER_ID, "hello")

        inserted = mock_db.insert.call_args.args[1]
        assert inserted["chat_id"] == f"{USER_ID}_{OTHER_USER_ID}"
        assert sent["sender"]["name"] == "Ravi"
        mock_publish.assert_called_once_with(sent)

    @patch("core.services.message_service.SupabaseClient")
    def test_replay_after_event(self, mock_db):
        """Test that replay returns only messages strictly after the cursor."""
        chat = chat_id(USER_ID, OTHER_USER_ID)
        cursor = message(MESSAGE_IDS[2], "2024-01-01T10:00:00")
        mock_db.fetch_by_id.return_value = cursor

        same_time_earlier = message(MESSAGE_IDS[1], "2024-01-01T10:00:00")
        same_time_later = message(MESSAGE_IDS[3], "2024-01-01T10:00:00")
        later = message(MESSAGE_IDS[4], "2024-01-01T10:05:00")

        with patch.object(
            MessageService, "list_chat",
            return_value=[same_time_earlier, cursor, same_time_later, later],
        ) as mock_list:
            replay = MessageService.replay_after_event(chat, MESSAGE_IDS[2])

        assert [m["id"] for m in replay] == [MESSAGE_IDS[3], MESSAGE_IDS[4]]
        assert mock_list.call_args.kwargs["inclusive"] is True

    @patch("core.services.message_service.SupabaseClient")
    def test_replay_ignores_foreign_cursor(self, mock_db):
        mock_db.fetch_by_id.return_value = {**message(MESSAGE_IDS[9], "2024-01-01"), "chat_id": "x_y"}

        assert MessageService.replay_after_event(chat_id(USER_ID, OTHER_USER_ID), MESSAGE_IDS[9]) == []

    @patch("core.services.message_service.SupabaseClient")
    def test_replay_ignores_malformed_cursor(self, mock_db):
        """Test that a Last-Event-ID that isn't a UUID never reaches the database."""
        assert MessageService.replay_after_event(chat_id(USER_ID, OTHER_USER_ID), "not-an-id") == []

        mock_db.fetch_by_id.assert_not_called()

    def test_stream_backlog_merges_both_cursors(self):
        chat = chat_id(USER_ID, OTHER_USER_ID)
        first = message(MESSAGE_IDS[1], "2024-01-01T10:00:00")
        second = message(MESSAGE_IDS[2], "2024-01-01T10:01:00")

        with patch.object(MessageService, "list_chat", return_value=[first, second]), \
                patch.object(MessageService, "replay_after_event", return_value=[second]):
            backlog = MessageService.stream_backlog(chat, after="2024-01-01", last_event_id=MESSAGE_IDS[0])

        assert [m["id"] for m in backlog] == [MESSAGE_IDS[1], MESSAGE_IDS[2]]

    def test_stream_backlog_empty_without_cursors(self):
        with patch.object(MessageService, "list_chat") as mock_list:
            assert MessageService.stream_backlog(chat_id(USER_ID, OTHER_USER_ID)) == []

        mock_list.assert_not_called()

    def test_require_participant(self):
        chat = chat_id(USER_ID, OTHER_USER_ID)

        assert MessageService.require_participant(chat, USER_ID) == (USER_ID, OTHER_USER_ID)

        with pytest.raises(ChatAccessDeniedError):
            MessageService.require_participant(chat, "33333333-3333-3333-3333-333333333333")

        with pytest.raises(ChatAccessDeniedError):
            MessageService.require_participant("garbage", USER_ID)
