from typing import Collection
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parley.models import User

from .base import BaseRepository


class UserRepository(BaseRepository):
    """Read-only view of the user directory owned by the auth layer."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_existing_user_ids(self, user_ids: Collection[UUID]) -> set[UUID]:
        """Returns the subset of user_ids that exist in the users table."""
        if not user_ids:
            return set()
        stmt = select(User.id).filter(User.id.in_(list(user_ids)))
        result = await self.session.execute(stmt)
        return set(result.scalars().all())
