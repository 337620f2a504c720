from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from parley.models import Conversation, Participant, utcnow

from .base import BaseRepository


class ConversationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create(self) -> Conversation:
        """Inserts a new conversation row and returns it with its generated id."""
        now = utcnow()
        new_conversation = Conversation(created_at=now, last_activity_at=now)
        self.session.add(new_conversation)
        await self.session.flush()
        return new_conversation

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        """Retrieves a specific conversation by its ID."""
        stmt = select(Conversation).filter(Conversation.id == conversation_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_user(self, user_id: UUID) -> Sequence[Conversation]:
        """Lists conversations a given user participates in, most recently active first."""
        stmt = (
            select(Conversation)
            .join(Participant, Conversation.id == Participant.conversation_id)
            .filter(Participant.user_id == user_id)
            .options(
                selectinload(Conversation.participants).joinedload(Participant.user),
            )
            .order_by(Conversation.last_activity_at.desc(), Conversation.id)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def touch_activity(self, conversation_id: UUID, activity_time: datetime) -> None:
        """Maintains the conversation activity timestamp after a message write.

        Never moves last_activity_at backwards. Runs on the caller's session so it
        lands in the same transaction as the message mutation.
        """
        stmt = (
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .where(
                or_(
                    Conversation.last_activity_at.is_(None),
                    Conversation.last_activity_at < activity_time,
                )
            )
            .values(last_activity_at=activity_time, updated_at=activity_time)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
