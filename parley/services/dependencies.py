from fastapi import Depends

from parley.core.config import settings
from parley.repositories.conversation_repository import ConversationRepository
from parley.repositories.dependencies import (
    get_conversation_repository,
    get_message_repository,
    get_participant_repository,
    get_user_repository,
)
from parley.repositories.message_repository import MessageRepository
from parley.repositories.participant_repository import ParticipantRepository
from parley.repositories.user_repository import UserRepository

from .conversation_service import ConversationService
from .messaging_service import MessagingService
from .participant_validator import ParticipantValidator

# Services are built per request around that request's repositories; nothing is
# cached between requests.


def get_participant_validator(
    user_repo: UserRepository = Depends(get_user_repository),
) -> ParticipantValidator:
    return ParticipantValidator(user_repository=user_repo)


def get_conversation_service(
    conv_repo: ConversationRepository = Depends(get_conversation_repository),
    part_repo: ParticipantRepository = Depends(get_participant_repository),
    validator: ParticipantValidator = Depends(get_participant_validator),
) -> ConversationService:
    """Provides an instance of the ConversationService with its dependencies."""
    return ConversationService(
        conversation_repository=conv_repo,
        participant_repository=part_repo,
        participant_validator=validator,
        require_other_participant=settings.REQUIRE_OTHER_PARTICIPANT,
    )


def get_messaging_service(
    part_repo: ParticipantRepository = Depends(get_participant_repository),
    msg_repo: MessageRepository = Depends(get_message_repository),
    conv_repo: ConversationRepository = Depends(get_conversation_repository),
) -> MessagingService:
    """Provides an instance of the MessagingService."""
    return MessagingService(
        participant_repository=part_repo,
        message_repository=msg_repo,
        conversation_repository=conv_repo,
        max_content_length=settings.MESSAGE_MAX_LENGTH,
    )
