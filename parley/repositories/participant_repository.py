from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.models import Participant, utcnow

from .base import BaseRepository


class ParticipantRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def add_participants(
        self, conversation_id: UUID, user_ids: Iterable[UUID]
    ) -> list[Participant]:
        """Bulk-inserts participant rows.

        Duplicates are not filtered here: a repeated (conversation, user) pair
        raises IntegrityError on flush and the caller decides what that means.
        """
        now = utcnow()
        participants = [
            Participant(conversation_id=conversation_id, user_id=user_id, joined_at=now)
            for user_id in user_ids
        ]
        self.session.add_all(participants)
        await self.session.flush()
        return participants

    async def get_by_conversation_id(self, conversation_id: UUID) -> Sequence[Participant]:
        stmt = select(Participant).filter(Participant.conversation_id == conversation_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def is_user_in_conversation(self, conversation_id: UUID, user_id: UUID) -> bool:
        """Checks membership with a single EXISTS lookup."""
        stmt = select(
            exists().where(
                Participant.conversation_id == conversation_id,
                Participant.user_id == user_id,
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
