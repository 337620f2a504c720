import uuid
from typing import Collection

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from parley.models import Message, utcnow
from parley.repositories.base import BaseRepository

from .conversation_repository import ConversationRepository


class MessageRepository(BaseRepository):
    """Message persistence.

    Every mutation here also advances the owning conversation's activity
    timestamp through ConversationRepository.touch_activity, on the same session,
    so a reader never sees a message newer than its conversation's
    last_activity_at.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.conv_repo = ConversationRepository(session)

    async def append(
        self, conversation_id: uuid.UUID, sender_id: uuid.UUID, content: str
    ) -> Message:
        """Creates a message. Sender membership is the caller's responsibility."""
        now = utcnow()
        new_message = Message(
            id=uuid.uuid4(),
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            is_read=False,
            created_at=now,
            updated_at=now,
        )
        self.session.add(new_message)
        await self.session.flush()
        await self.conv_repo.touch_activity(conversation_id, now)
        return new_message

    async def list_by_conversation(
        self, conversation_id: uuid.UUID, limit: int = 50, offset: int = 0
    ) -> list[Message]:
        """Returns one page of messages, newest first."""
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_latest(self, conversation_id: uuid.UUID) -> Message | None:
        messages = await self.list_by_conversation(conversation_id, limit=1)
        return messages[0] if messages else None

    async def mark_read(self, conversation_id: uuid.UUID, reader_id: uuid.UUID) -> int:
        """Marks every unread message the reader received as read.

        Messages sent by the reader are left alone. Returns the number of rows updated.
        """
        now = utcnow()
        stmt = (
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.sender_id != reader_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount:
            await self.conv_repo.touch_activity(conversation_id, now)
        return result.rowcount

    async def count_unread_by_conversation(
        self, conversation_ids: Collection[uuid.UUID], reader_id: uuid.UUID
    ) -> dict[uuid.UUID, int]:
        """Counts unread messages addressed to reader, keyed by conversation id."""
        if not conversation_ids:
            return {}
        stmt = (
            select(Message.conversation_id, func.count(Message.id))
            .where(
                Message.conversation_id.in_(list(conversation_ids)),
                Message.sender_id != reader_id,
                Message.is_read.is_(False),
            )
            .group_by(Message.conversation_id)
        )
        result = await self.session.execute(stmt)
        return {conversation_id: count for conversation_id, count in result.all()}
