from sqlalchemy import Column, DateTime
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow


class Conversation(BaseModel):
    __tablename__ = "conversations"

    # id, created_at, updated_at are inherited from BaseModel
    # Advanced only by message writes, see ConversationRepository.touch_activity
    last_activity_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    participants = relationship(
        "Participant", back_populates="conversation", cascade="all, delete-orphan"
    )
    messages = relationship(
        "Message", back_populates="conversation", cascade="all, delete-orphan"
    )
