from sqlalchemy import Boolean, Column, ForeignKey, Index, Text, sql
from sqlalchemy.orm import relationship
from sqlalchemy.types import Uuid

from .base import BaseModel


class Message(BaseModel):
    __tablename__ = "messages"

    conversation_id = Column(
        Uuid(as_uuid=True), ForeignKey("conversations.id"), nullable=False
    )
    sender_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=sql.expression.false()
    )

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User", back_populates="messages", foreign_keys=[sender_id])

    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
    )
