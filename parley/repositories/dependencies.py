from typing import Callable, Type, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from parley.db import get_db_session

from .base import BaseRepository
from .conversation_repository import ConversationRepository
from .message_repository import MessageRepository
from .participant_repository import ParticipantRepository
from .user_repository import UserRepository

RepoT = TypeVar("RepoT", bound=BaseRepository)


def _repository_provider(repository_cls: Type[RepoT]) -> Callable[..., RepoT]:
    """Builds a dependency binding repository_cls to the request's session."""

    def provide(session: AsyncSession = Depends(get_db_session)) -> RepoT:
        return repository_cls(session)

    provide.__name__ = f"get_{repository_cls.__name__}"
    return provide


# FastAPI resolves get_db_session once per request, so all of these share it
get_conversation_repository = _repository_provider(ConversationRepository)
get_participant_repository = _repository_provider(ParticipantRepository)
get_message_repository = _repository_provider(MessageRepository)
get_user_repository = _repository_provider(UserRepository)
