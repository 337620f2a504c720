from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.types import Uuid

from .base import BaseModel, utcnow


class Participant(BaseModel):
    __tablename__ = "conversation_participants"

    conversation_id = Column(
        Uuid(as_uuid=True), ForeignKey("conversations.id"), nullable=False
    )
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    conversation = relationship(
        "Conversation", back_populates="participants", foreign_keys=[conversation_id]
    )
    user = relationship("User", back_populates="participations", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint(
            "conversation_id", "user_id", name="uq_participant_conversation_user"
        ),
    )
