from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """Shares the request's session; repositories flush but never commit."""

    def __init__(self, session: AsyncSession):
        self.session = session
