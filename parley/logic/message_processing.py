import logging
from uuid import UUID

from parley.schemas.message import (
    ConversationMessagesRequest,
    ConversationMessagesResponse,
    MarkMessagesAsReadRequest,
    MessageResponse,
    MessageSendRequest,
    MessageSendResponse,
)
from parley.services.exceptions import ServiceError
from parley.services.messaging_service import MessagingService

logger = logging.getLogger(__name__)


async def handle_send_message(
    request_data: MessageSendRequest,
    sender_id: UUID,
    messaging_service: MessagingService,
) -> MessageSendResponse:
    """
    Handles sending a message to a conversation.

    Raises:
        BusinessRuleError: If the content is blank or too long.
        NotAuthorizedError: If the sender is not a participant.
        DatabaseError: If a database error occurs.
    """
    logger.debug(
        f"Handler: sending message to {request_data.conversation_id} from {sender_id}"
    )
    try:
        message = await messaging_service.send_message(
            conversation_id=request_data.conversation_id,
            content=request_data.content,
            sender_id=sender_id,
        )
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in handle_send_message: {e}", exc_info=True)
        raise ServiceError("An unexpected error occurred while sending the message.")

    return MessageSendResponse.model_validate(message)


async def handle_mark_messages_as_read(
    request_data: MarkMessagesAsReadRequest,
    reader_id: UUID,
    messaging_service: MessagingService,
) -> dict:
    updated = await messaging_service.mark_messages_as_read(
        conversation_id=request_data.conversation_id, reader_id=reader_id
    )
    logger.info(
        f"Handler: {updated} messages marked read in {request_data.conversation_id}"
    )
    return {}


async def handle_get_conversation_messages(
    request_data: ConversationMessagesRequest,
    requester_id: UUID,
    messaging_service: MessagingService,
) -> ConversationMessagesResponse:
    """Handles fetching one newest-first page of a conversation's messages."""
    messages = await messaging_service.list_messages(
        conversation_id=request_data.conversation_id,
        requester_id=requester_id,
        limit=request_data.limit,
        offset=request_data.offset,
    )
    return ConversationMessagesResponse(
        messages=[MessageResponse.model_validate(message) for message in messages]
    )
