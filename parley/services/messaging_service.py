import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from parley.models import Conversation, Message, Participant
from parley.repositories.conversation_repository import ConversationRepository
from parley.repositories.message_repository import MessageRepository
from parley.repositories.participant_repository import ParticipantRepository

from .exceptions import BusinessRuleError, DatabaseError, NotAuthorizedError

logger = logging.getLogger(__name__)


@dataclass
class ConversationSummary:
    conversation: Conversation
    participants: list[Participant] = field(default_factory=list)
    last_message: Message | None = None
    unread_count: int = 0


class MessagingService:
    def __init__(
        self,
        participant_repository: ParticipantRepository,
        message_repository: MessageRepository,
        conversation_repository: ConversationRepository,
        max_content_length: int | None = None,
    ):
        self.part_repo = participant_repository
        self.msg_repo = message_repository
        self.conv_repo = conversation_repository
        self.max_content_length = max_content_length
        self.session = message_repository.session

    async def _require_participant(
        self, conversation_id: UUID, user_id: UUID, message: str
    ) -> None:
        # Explicit membership check; nothing in storage enforces this for us
        is_member = await self.part_repo.is_user_in_conversation(
            conversation_id=conversation_id, user_id=user_id
        )
        if not is_member:
            raise NotAuthorizedError(message)

    async def send_message(
        self, conversation_id: UUID, content: str, sender_id: UUID
    ) -> Message:
        """
        Appends a message from a participant to a conversation.

        Blank content is rejected before any storage access. The message insert and
        the conversation activity update are committed together.
        """
        if not content or not content.strip():
            raise BusinessRuleError("Message content cannot be empty.")
        if self.max_content_length is not None and len(content) > self.max_content_length:
            raise BusinessRuleError(
                f"Message content cannot exceed {self.max_content_length} characters."
            )

        await self._require_participant(
            conversation_id, sender_id, "Sender is not a participant of this conversation."
        )

        try:
            new_message = await self.msg_repo.append(
                conversation_id=conversation_id, sender_id=sender_id, content=content
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Database error sending message to {conversation_id}: {e}", exc_info=True
            )
            raise DatabaseError("Failed to send message due to a database error.")

        return new_message

    async def mark_messages_as_read(self, conversation_id: UUID, reader_id: UUID) -> int:
        """Marks everything the reader received in the conversation as read."""
        await self._require_participant(
            conversation_id, reader_id, "User is not a participant of this conversation."
        )

        try:
            updated = await self.msg_repo.mark_read(conversation_id, reader_id)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Database error marking messages read in {conversation_id}: {e}",
                exc_info=True,
            )
            raise DatabaseError("Failed to mark messages as read due to a database error.")

        logger.debug(f"Marked {updated} messages read in {conversation_id} for {reader_id}")
        return updated

    async def list_conversations_for_user(self, user_id: UUID) -> list[ConversationSummary]:
        """Fetches every conversation the user is in, with participants, last message
        and the number of unread messages addressed to the user."""
        try:
            conversations = await self.conv_repo.list_for_user(user_id)
            unread_counts = await self.msg_repo.count_unread_by_conversation(
                [conversation.id for conversation in conversations], user_id
            )
            summaries = []
            for conversation in conversations:
                summaries.append(
                    ConversationSummary(
                        conversation=conversation,
                        participants=list(conversation.participants),
                        last_message=await self.msg_repo.get_latest(conversation.id),
                        unread_count=unread_counts.get(conversation.id, 0),
                    )
                )
            return summaries
        except SQLAlchemyError as e:
            logger.error(
                f"Database error fetching conversations for user {user_id}: {e}",
                exc_info=True,
            )
            raise DatabaseError(
                "Failed to fetch user conversations due to a database error."
            )

    async def list_messages(
        self,
        conversation_id: UUID,
        requester_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Message]:
        """Returns a newest-first page of the conversation's messages."""
        await self._require_participant(
            conversation_id, requester_id, "User is not a participant of this conversation."
        )
        try:
            return await self.msg_repo.list_by_conversation(
                conversation_id, limit=limit, offset=offset
            )
        except SQLAlchemyError as e:
            logger.error(
                f"Database error listing messages for {conversation_id}: {e}",
                exc_info=True,
            )
            raise DatabaseError("Failed to list messages due to a database error.")
