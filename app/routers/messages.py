# =============================================================================
# app/routers/messages.py - Direct Message Endpoints
# =============================================================================
# Send, poll and stream one-to-one messages.
#
# Clients can poll (GET /messages?receiver_id=&after=) or hold a stream
# open (GET /messages/stream?chat_id=). Both return messages in
# (created_at, id) order and every streamed message carries its id, so a
# client mixing the two can deduplicate by id.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Path, Query, Request, status
from pydantic import BaseModel

from app.auth import get_current_user, get_stream_user, AuthUser
from app.streaming.manager import chat_channel
from app.streaming.sse import sse_response, stream_events
from core.models.messages import MessageCreate, MessageResponse
from core.services.message_service import MessageService
from lib.messages import chat_id as make_chat_id

logger = logging.getLogger(__name__)

router = APIRouter()


class MessageList(BaseModel):
    chat_id: str
    messages: list[MessageResponse]
    count: int


def _message_list(chat: str, messages: list[dict]) -> MessageList:
    return MessageList(
        chat_id=chat,
        messages=[MessageResponse(**m) for m in messages],
        count=len(messages),
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    request: MessageCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Send a message.

    Raises:
        400: Receiver doesn't exist or is the sender
    """
    return MessageResponse(**MessageService.send(user.id, request.receiver_id, request.content))


@router.get("", response_model=MessageList)
async def poll_messages(
    receiver_id: Annotated[UUID, Query(description="The other participant")],
    user: AuthUser = Depends(get_current_user),
    after: Annotated[str | None, Query(description="Only messages created after this ISO timestamp")] = None,
):
    """Messages between the caller and `receiver_id`, oldest first."""
    messages = MessageService.conversation(user.id, receiver_id, after=after)
    return _message_list(make_chat_id(str(user.id), str(receiver_id)), messages)


@router.get("/stream")
async def stream_chat(
    request: Request,
    chat_id: Annotated[str, Query(description="Chat id: both user ids sorted, joined with '_'")],
    user: AuthUser = Depends(get_stream_user),
    after: Annotated[str | None, Query(description="Replay messages created after this ISO timestamp")] = None,
    last_event_id: Annotated[str | None, Header(alias="Last-Event-ID")] = None,
):
    """
    Server-sent events for one chat.

    Replays messages after `after` and/or after the Last-Event-ID message,
    then streams new ones. Each event is `id: <message id>` plus a JSON
    `data:` line; a `: keepalive` comment is sent when the chat is quiet.

    Authenticate with the Authorization header, or ?token= for EventSource.

    Raises:
        403: Caller is not a participant of the chat
    """
    MessageService.require_participant(chat_id, user.id)

    def load_backlog() -> list[dict]:
        return MessageService.stream_backlog(chat_id, after=after, last_event_id=last_event_id)

    logger.info(f"User {user.id} opened stream for chat {chat_id}")
    return sse_response(stream_events(request, chat_channel(chat_id), load_backlog))


@router.get("/{user_id}", response_model=MessageList)
async def get_conversation(
    user_id: Annotated[UUID, Path(description="The other participant")],
    user: AuthUser = Depends(get_current_user),
    after: Annotated[str | None, Query(description="Only messages created after this ISO timestamp")] = None,
):
    """Messages between the caller and `user_id`, oldest first."""
    messages = MessageService.conversation(user.id, user_id, after=after)
    return _message_list(make_chat_id(str(user.id), str(user_id)), messages)
