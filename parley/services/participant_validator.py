import logging
from dataclasses import dataclass, field
from typing import Iterable
from uuid import UUID

from parley.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class ParticipantValidation:
    valid: set[UUID] = field(default_factory=set)
    invalid: set[str] = field(default_factory=set)

    @property
    def is_valid(self) -> bool:
        return not self.invalid


class ParticipantValidator:
    """Partitions candidate user ids into existing and unknown users."""

    def __init__(self, user_repository: UserRepository):
        self.user_repo = user_repository

    async def validate_user_ids(
        self, candidate_ids: Iterable[UUID | str]
    ) -> ParticipantValidation:
        """
        Checks each distinct candidate against the user directory.

        Ids that are not well-formed UUIDs cannot name a user, so they are
        classified invalid without a lookup. Storage errors propagate.
        """
        validation = ParticipantValidation()
        parsed: dict[UUID, str] = {}
        for candidate in candidate_ids:
            if isinstance(candidate, UUID):
                parsed[candidate] = str(candidate)
                continue
            try:
                parsed[UUID(str(candidate))] = str(candidate)
            except ValueError:
                validation.invalid.add(str(candidate))

        existing = await self.user_repo.get_existing_user_ids(parsed.keys())
        for user_id, raw in parsed.items():
            if user_id in existing:
                validation.valid.add(user_id)
            else:
                validation.invalid.add(raw)

        if validation.invalid:
            logger.info(f"Rejected unknown participant ids: {sorted(validation.invalid)}")
        return validation
