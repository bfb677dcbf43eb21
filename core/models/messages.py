# =============================================================================
# core/models/messages.py - Chat Message Schemas
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .users import UserSummary


class MessageCreate(BaseModel):
    """A new direct message."""
    receiver_id: UUID
    content: str = Field(..., min_length=1, max_length=5000)


class MessageResponse(BaseModel):
    """A stored message with its sender's public fields."""
    id: str
    sender_id: str
    receiver_id: str
    content: str
    chat_id: str
    created_at: datetime
    sender: UserSummary | None = None
