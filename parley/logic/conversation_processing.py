import logging
from uuid import UUID

# Logic related to processing conversation requests, decoupled from API routes.
from parley.models import Participant
from parley.schemas.conversation import (
    ConversationCreateRequest,
    ConversationCreateResponse,
    ConversationSummaryResponse,
    UserConversationsResponse,
)
from parley.schemas.message import MessageResponse
from parley.schemas.participant import ParticipantAddRequest, ParticipantSummary
from parley.services.conversation_service import ConversationService
from parley.services.exceptions import ServiceError
from parley.services.messaging_service import ConversationSummary, MessagingService

logger = logging.getLogger(__name__)


def _participant_summary(participant: Participant) -> ParticipantSummary:
    return ParticipantSummary(
        id=participant.id,
        user_id=participant.user_id,
        username=participant.user.username if participant.user else None,
        joined_at=participant.joined_at,
    )


def _conversation_summary(summary: ConversationSummary) -> ConversationSummaryResponse:
    return ConversationSummaryResponse(
        id=summary.conversation.id,
        created_at=summary.conversation.created_at,
        last_activity_at=summary.conversation.last_activity_at,
        participants=[_participant_summary(p) for p in summary.participants],
        last_message=(
            MessageResponse.model_validate(summary.last_message)
            if summary.last_message
            else None
        ),
        unread_count=summary.unread_count,
    )


async def handle_create_conversation(
    request_data: ConversationCreateRequest,
    creator_id: UUID,
    conv_service: ConversationService,
) -> ConversationCreateResponse:
    """
    Handles the core logic for creating a new conversation.

    Raises:
        InvalidParticipantsError: If any requested id does not name an existing user.
        BusinessRuleError: If the participant set is not acceptable.
        ConflictError: If the participant rows conflict with existing state.
        DatabaseError: If a database error occurs during creation.
    """
    try:
        conversation = await conv_service.create_conversation(
            requested_participant_ids=request_data.participant_ids,
            creator_id=creator_id,
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in handle_create_conversation: {e}", exc_info=True)
        raise ServiceError("An unexpected error occurred while creating the conversation.")

    return ConversationCreateResponse(id=conversation.id)


async def handle_add_participant(
    request_data: ParticipantAddRequest,
    requester_id: UUID,
    conv_service: ConversationService,
) -> dict:
    """Handles adding a user to a conversation the requester belongs to."""
    try:
        participant = await conv_service.add_participant(
            conversation_id=request_data.conversation_id,
            user_id=request_data.user_id,
            requester_id=requester_id,
        )
    except ServiceError as e:
        logger.info(f"Service error adding participant: {e}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error in handle_add_participant: {e}", exc_info=True)
        raise ServiceError("An unexpected error occurred while adding the participant.")

    logger.info(
        f"Handler: user {participant.user_id} added to conversation "
        f"{participant.conversation_id} by {requester_id}"
    )
    return {}


async def handle_get_user_conversations(
    user_id: UUID,
    messaging_service: MessagingService,
) -> UserConversationsResponse:
    """Handles listing the caller's conversations with participants and unread counts."""
    # DatabaseError and other service errors propagate to the route
    summaries = await messaging_service.list_conversations_for_user(user_id)
    return UserConversationsResponse(
        conversations=[_conversation_summary(summary) for summary in summaries]
    )
