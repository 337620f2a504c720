import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from parley.models import Conversation, Participant
from parley.repositories.conversation_repository import ConversationRepository
from parley.repositories.participant_repository import ParticipantRepository

from .exceptions import (
    BusinessRuleError,
    ConflictError,
    ConversationNotFoundError,
    DatabaseError,
    InvalidParticipantsError,
    NotAuthorizedError,
)
from .participant_validator import ParticipantValidator

logger = logging.getLogger(__name__)


class ConversationService:
    def __init__(
        self,
        conversation_repository: ConversationRepository,
        participant_repository: ParticipantRepository,
        participant_validator: ParticipantValidator,
        require_other_participant: bool = False,
    ):
        self.conv_repo = conversation_repository
        self.part_repo = participant_repository
        self.validator = participant_validator
        self.require_other_participant = require_other_participant
        # The session is implicitly shared via the repositories
        self.session = conversation_repository.session

    async def create_conversation(
        self, requested_participant_ids: Iterable[UUID | str], creator_id: UUID
    ) -> Conversation:
        """
        Creates a conversation whose participants are the requested users plus the
        creator, deduplicated.

        Every id is validated before anything is written. The conversation row and
        all participant rows are committed together or not at all.
        """
        candidates: dict[str, UUID | str] = {str(creator_id): creator_id}
        for participant_id in requested_participant_ids:
            candidates.setdefault(str(participant_id).lower(), participant_id)

        validation = await self.validator.validate_user_ids(candidates.values())
        if not validation.is_valid:
            raise InvalidParticipantsError(validation.invalid)

        if self.require_other_participant and validation.valid == {creator_id}:
            raise BusinessRuleError(
                "A conversation needs at least one participant besides its creator."
            )

        try:
            new_conversation = await self.conv_repo.create()
            await self.part_repo.add_participants(
                new_conversation.id, sorted(validation.valid)
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Integrity error creating conversation: {e}", exc_info=True)
            raise ConflictError(
                "Could not create conversation due to a data conflict (e.g., duplicate participant)."
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error creating conversation: {e}", exc_info=True)
            raise DatabaseError("Failed to create conversation due to a database error.")
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Unexpected error creating conversation: {e}", exc_info=True)
            raise

        logger.info(
            f"Conversation {new_conversation.id} created by {creator_id} "
            f"with {len(validation.valid)} participants"
        )
        return new_conversation

    async def add_participant(
        self, conversation_id: UUID, user_id: UUID | str, requester_id: UUID
    ) -> Participant:
        """Adds one user to an existing conversation on behalf of a participant."""
        is_member = await self.part_repo.is_user_in_conversation(
            conversation_id=conversation_id, user_id=requester_id
        )
        if not is_member:
            raise NotAuthorizedError("User is not a participant of this conversation.")

        conversation = await self.conv_repo.get_by_id(conversation_id)
        if not conversation:
            logger.error(
                f"Data integrity issue: participant {requester_id} references "
                f"missing conversation {conversation_id}."
            )
            raise ConversationNotFoundError()

        validation = await self.validator.validate_user_ids([user_id])
        if not validation.is_valid:
            raise InvalidParticipantsError(validation.invalid)
        (new_user_id,) = validation.valid

        try:
            (new_participant,) = await self.part_repo.add_participants(
                conversation.id, [new_user_id]
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Integrity error adding participant: {e}", exc_info=True)
            raise ConflictError("User is already a participant of this conversation.")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error adding participant: {e}", exc_info=True)
            raise DatabaseError("Failed to add participant due to a database error.")
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Unexpected error adding participant: {e}", exc_info=True)
            raise

        return new_participant
