import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from parley.api.common import APIResponse, BaseRouter, json_body
from parley.auth_config import get_caller_id
from parley.logic.conversation_processing import (
    handle_add_participant,
    handle_create_conversation,
    handle_get_user_conversations,
)
from parley.schemas.conversation import (
    ConversationCreateRequest,
    UserConversationsRequest,
)
from parley.schemas.participant import ParticipantAddRequest
from parley.services.conversation_service import ConversationService
from parley.services.dependencies import get_conversation_service, get_messaging_service
from parley.services.messaging_service import MessagingService

logger = logging.getLogger(__name__)
conversations_router_instance = APIRouter()
router = BaseRouter(router=conversations_router_instance, default_tags=["conversations"])

# caller_id is declared before the body so authentication always runs first


@router.function("/create-conversation", name="create_conversation")
async def create_conversation(
    caller_id: UUID = Depends(get_caller_id),
    request_data: ConversationCreateRequest = Depends(json_body(ConversationCreateRequest)),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Creates a conversation between the caller and the listed users."""
    result = await handle_create_conversation(
        request_data=request_data, creator_id=caller_id, conv_service=conv_service
    )
    logger.info(f"Conversation created: {result.id}")
    return APIResponse.success(result)


@router.function("/add-participant", name="add_participant", tags=["participants"])
async def add_participant(
    caller_id: UUID = Depends(get_caller_id),
    request_data: ParticipantAddRequest = Depends(json_body(ParticipantAddRequest)),
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Adds a user to a conversation the caller participates in."""
    result = await handle_add_participant(
        request_data=request_data, requester_id=caller_id, conv_service=conv_service
    )
    return APIResponse.success(result)


@router.function("/get-user-conversations", name="get_user_conversations")
async def get_user_conversations(
    caller_id: UUID = Depends(get_caller_id),
    request_data: UserConversationsRequest = Depends(json_body(UserConversationsRequest)),
    messaging_service: MessagingService = Depends(get_messaging_service),
):
    """Lists the caller's conversations; the body carries no fields but must be JSON."""
    result = await handle_get_user_conversations(
        user_id=caller_id, messaging_service=messaging_service
    )
    return APIResponse.success(result)
