import logging
from uuid import UUID

from fastapi import APIRouter, Depends

from parley.api.common import APIResponse, BaseRouter, json_body
from parley.auth_config import get_caller_id
from parley.logic.message_processing import (
    handle_get_conversation_messages,
    handle_mark_messages_as_read,
    handle_send_message,
)
from parley.schemas.message import (
    ConversationMessagesRequest,
    MarkMessagesAsReadRequest,
    MessageSendRequest,
)
from parley.services.dependencies import get_messaging_service
from parley.services.messaging_service import MessagingService

logger = logging.getLogger(__name__)
messages_router_instance = APIRouter()
router = BaseRouter(router=messages_router_instance, default_tags=["messages"])


@router.function("/send-message", name="send_message")
async def send_message(
    caller_id: UUID = Depends(get_caller_id),
    request_data: MessageSendRequest = Depends(json_body(MessageSendRequest)),
    messaging_service: MessagingService = Depends(get_messaging_service),
):
    """Sends a message from the caller to a conversation."""
    result = await handle_send_message(
        request_data=request_data,
        sender_id=caller_id,
        messaging_service=messaging_service,
    )
    return APIResponse.success(result)


@router.function("/mark-messages-as-read", name="mark_messages_as_read")
async def mark_messages_as_read(
    caller_id: UUID = Depends(get_caller_id),
    request_data: MarkMessagesAsReadRequest = Depends(
        json_body(MarkMessagesAsReadRequest)
    ),
    messaging_service: MessagingService = Depends(get_messaging_service),
):
    result = await handle_mark_messages_as_read(
        request_data=request_data,
        reader_id=caller_id,
        messaging_service=messaging_service,
    )
    return APIResponse.success(result)


@router.function("/get-conversation-messages", name="get_conversation_messages")
async def get_conversation_messages(
    caller_id: UUID = Depends(get_caller_id),
    request_data: ConversationMessagesRequest = Depends(
        json_body(ConversationMessagesRequest)
    ),
    messaging_service: MessagingService = Depends(get_messaging_service),
):
    """Returns a newest-first page of messages; limit and offset are optional."""
    result = await handle_get_conversation_messages(
        request_data=request_data,
        requester_id=caller_id,
        messaging_service=messaging_service,
    )
    return APIResponse.success(result)
