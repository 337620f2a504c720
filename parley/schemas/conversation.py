from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from .message import MessageResponse
from .participant import ParticipantSummary


class ConversationCreateRequest(BaseModel):
    # Kept as plain strings so malformed ids are reported back as invalid users
    participant_ids: list[str]


class ConversationCreateResponse(BaseModel):
    id: UUID


class ConversationSummaryResponse(BaseModel):
    id: UUID
    created_at: datetime
    last_activity_at: datetime
    participants: list[ParticipantSummary]
    last_message: MessageResponse | None = None
    unread_count: int = 0


class UserConversationsResponse(BaseModel):
    conversations: list[ConversationSummaryResponse]


class UserConversationsRequest(BaseModel):
    """get-user-conversations takes no fields; the body may be empty or {}."""
