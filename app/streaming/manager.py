# =============================================================================
# app/streaming/manager.py - Server-Sent Events Subscriber Manager
# =============================================================================
# Tracks open SSE streams per channel and fans events out to them.
#
# Channels:
#   - chat:<chat_id>  messages of one conversation
#   - user:<user_id>  notifications and IP filing events for one user
#
# Each open stream owns an asyncio.Queue; the stream's generator awaits it.
#
# Usage:
#   from app.streaming import stream_manager
#
#   queue = stream_manager.subscribe("chat:a_b")
#   event = await queue.get()
#   stream_manager.unsubscribe("chat:a_b", queue)
#
#   await stream_manager.broadcast("chat:a_b", {"type": "message", ...})
# =============================================================================

import asyncio
import logging
from typing import Any, Dict, Set

logger = logging.getLogger(__name__)

# Events buffered per stream before it is treated as dead
QUEUE_SIZE = 100

# Last item on a dropped subscriber's queue: its stream ends and the client
# reconnects, replaying from Last-Event-ID
STREAM_CLOSED: dict[str, Any] = {"type": "stream_closed"}


def chat_channel(chat_id: str) -> str:
    return f"chat:{chat_id}"


def user_channel(user_id: str) -> str:
    return f"user:{user_id}"


class StreamManager:
    """
    Manages SSE subscriber queues organized by channel.

    A user can have several streams open on one channel (e.g. browser tabs);
    every event for the channel goes to all of them.
    """

    def __init__(self):
        # channel -> set of subscriber queues
        self.subscribers: Dict[str, Set[asyncio.Queue]] = {}
        self._total_subscribers = 0

    def subscribe(self, channel: str) -> asyncio.Queue:
        """
        Open a subscriber queue on a channel.

        Returns:
            asyncio.Queue: Receives every event broadcast to the channel
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_SIZE)
        self.subscribers.setdefault(channel, set()).add(queue)
        self._total_subscribers += 1

        logger.info(
            f"Stream subscribed to {channel}. "
            f"Total subscribers: {self._total_subscribers}"
        )
        return queue

    def unsubscribe(self, channel: str, queue: asyncio.Queue) -> None:
        """Remove a subscriber queue."""
        queues = self.subscribers.get(channel)
        if queues is None or queue not in queues:
            return

        queues.discard(queue)
        self._total_subscribers -= 1
        if not queues:
            del self.subscribers[channel]

        logger.info(
            f"Stream unsubscribed from {channel}. "
            f"Total subscribers: {self._total_subscribers}"
        )

    async def broadcast(self, channel: str, event: dict[str, Any]) -> int:
        """
        Queue an event for every subscriber of a channel.

        A subscriber whose queue is full has stopped reading; it is dropped
        and its queue is replaced by STREAM_CLOSED so its stream ends.

        Returns:
            int: Number of subscribers the event was queued for
        """
        queues = self.subscribers.get(channel)
        if not queues:
            logger.debug(f"No subscribers for {channel}, skipping broadcast")
            return 0

        dead: Set[asyncio.Queue] = set()
        sent_count = 0

        for queue in queues:
            try:
                queue.put_nowait(event)
                sent_count += 1
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full on {channel}, dropping it")
                dead.add(queue)

        for queue in dead:
            self.unsubscribe(channel, queue)
            self._close(queue)

        logger.debug(
            f"Broadcast to {channel}: type={event.get('type')}, "
            f"queued for {sent_count} subscribers"
        )
        return sent_count

    @staticmethod
    def _close(queue: asyncio.Queue) -> None:
        """Discard pending events and leave only the close marker."""
        while not queue.empty():
            queue.get_nowait()
        queue.put_nowait(STREAM_CLOSED)

    def get_subscriber_count(self, channel: str | None = None) -> int:
        """Subscribers on one channel, or in total."""
        if channel:
            return len(self.subscribers.get(channel, set()))
        return self._total_subscribers

    def get_active_channels(self) -> list[str]:
        """Channels with at least one subscriber."""
        return list(self.subscribers.keys())


# Global singleton instance
stream_manager = StreamManager()
