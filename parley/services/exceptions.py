from typing import Any


class ServiceError(Exception):
    """Base class for service layer errors."""

    def __init__(
        self,
        message="An internal service error occurred.",
        status_code=500,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ConversationNotFoundError(ServiceError):
    def __init__(self, message="Conversation not found."):
        super().__init__(message, status_code=404)


class NotAuthorizedError(ServiceError):
    def __init__(self, message="User not authorized for this action."):
        super().__init__(message, status_code=403)


class BusinessRuleError(ServiceError):
    """For violations of specific business rules (e.g., empty message content)."""

    def __init__(self, message="Action violates business rules.", details=None):
        super().__init__(message, status_code=400, details=details)


class InvalidParticipantsError(BusinessRuleError):
    """Raised when participant ids do not resolve to existing users."""

    def __init__(self, invalid_user_ids):
        self.invalid_user_ids = sorted(str(user_id) for user_id in invalid_user_ids)
        super().__init__(
            f"Invalid user IDs: {', '.join(self.invalid_user_ids)}",
            details={"invalid_user_ids": self.invalid_user_ids},
        )


class ConflictError(ServiceError):
    """For conflicts like trying to add an existing participant."""

    def __init__(self, message="Operation conflicts with existing state."):
        super().__init__(message, status_code=409)


class DatabaseError(ServiceError):
    """For general database errors during service operations."""

    def __init__(self, message="A database error occurred."):
        super().__init__(message, status_code=500)
