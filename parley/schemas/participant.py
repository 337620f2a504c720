from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ParticipantAddRequest(BaseModel):
    conversation_id: UUID
    user_id: str


class ParticipantSummary(BaseModel):
    id: UUID
    user_id: UUID
    username: str | None = None
    joined_at: datetime
