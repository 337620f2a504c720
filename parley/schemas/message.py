import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from parley.core.config import settings


class MessageSendRequest(BaseModel):
    conversation_id: uuid.UUID
    content: str


class MessageSendResponse(BaseModel):
    id: uuid.UUID
    content: str
    sender_id: uuid.UUID
    conversation_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MarkMessagesAsReadRequest(BaseModel):
    conversation_id: uuid.UUID


class ConversationMessagesRequest(BaseModel):
    conversation_id: uuid.UUID
    limit: int = Field(
        default=settings.DEFAULT_MESSAGE_LIMIT, ge=1, le=settings.MAX_MESSAGE_LIMIT
    )
    offset: int = Field(default=0, ge=0)


class MessageResponse(BaseModel):
    id: uuid.UUID
    sender_id: uuid.UUID
    content: str
    created_at: datetime
    is_read: bool

    model_config = ConfigDict(from_attributes=True)


class ConversationMessagesResponse(BaseModel):
    messages: list[MessageResponse]
