# =============================================================================
# app/streaming/sse.py - Server-Sent Events Responses
# =============================================================================
# Turns a stream channel into a text/event-stream response:
#   1. subscribe first, so nothing published during replay is lost
#   2. load and send the replayed backlog
#   3. forward live events, skipping messages already sent
#   4. send a ": keepalive" comment whenever the channel is quiet
#   5. end the response if the manager dropped this subscriber
# =============================================================================

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Iterable

from fastapi import Request
from fastapi.responses import StreamingResponse

from app.config import settings
from app.streaming.manager import STREAM_CLOSED, stream_manager
from lib.messages import format_sse

logger = logging.getLogger(__name__)

KEEPALIVE = ": keepalive\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

ReplayLoader = Callable[[], Iterable[dict[str, Any]]]


async def stream_events(
    request: Request,
    channel: str,
    replay: ReplayLoader | None = None,
    keepalive: float | None = None,
) -> AsyncIterator[str]:
    """
    Yield SSE frames for a channel until the client disconnects.

    Message events use the message id as the SSE id, so a reconnecting
    EventSource sends it back as Last-Event-ID.

    Args:
        request: Incoming request (polled for disconnects)
        channel: Stream channel to subscribe to
        replay: Loads stored messages to send before live events; called
            after subscribing so a message sent in between is still streamed
        keepalive: Seconds of silence before a keepalive comment
    """
    keepalive = keepalive or settings.STREAM_KEEPALIVE_SECONDS
    queue = stream_manager.subscribe(channel)
    sent_ids: set[str] = set()

    try:
        yield ": connected\n\n"

        backlog = await asyncio.to_thread(replay) if replay else ()
        for message in backlog:
            message_id = str(message["id"])
            sent_ids.add(message_id)
            yield format_sse({"type": "message", "message": message}, event_id=message_id)

        while True:
            if await request.is_disconnected():
                logger.debug(f"Stream client on {channel} disconnected")
                break

            try:
                event = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield KEEPALIVE
                continue

            if event is STREAM_CLOSED:
                logger.info(f"Stream on {channel} fell behind and was dropped, closing")
                break

            event_id = None
            message = event.get("message")
            if isinstance(message, dict) and message.get("id") is not None:
                event_id = str(message["id"])
                if event_id in sent_ids:
                    continue
                sent_ids.add(event_id)

            yield format_sse(event, event_id=event_id)

    finally:
        stream_manager.unsubscribe(channel, queue)


def sse_response(events: AsyncIterator[str]) -> StreamingResponse:
    """Wrap an SSE frame generator in a streaming response."""
    return StreamingResponse(
        events,
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
