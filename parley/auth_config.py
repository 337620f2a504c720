import logging
import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi_users import BaseUserManager, FastAPIUsers, UUIDIDMixin
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.db import SQLAlchemyUserDatabase

from parley.api.common.exceptions import UnauthorizedError
from parley.core.config import settings
from parley.db import get_user_db
from parley.models import User

logger = logging.getLogger(__name__)


class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    reset_password_token_secret = settings.SECRET
    verification_token_secret = settings.SECRET

    async def on_after_register(self, user: User, request: Optional[Request] = None):
        logger.info(f"User {user.id} has registered.")


async def get_user_manager(user_db: SQLAlchemyUserDatabase = Depends(get_user_db)):
    yield UserManager(user_db)


bearer_transport = BearerTransport(tokenUrl="auth/jwt/login")


def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.SECRET,
        lifetime_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


auth_backend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

fastapi_users = FastAPIUsers[User, uuid.UUID](get_user_manager, [auth_backend])

# Resolves to None instead of raising so the 401 goes through our error envelope
optional_active_user = fastapi_users.current_user(active=True, optional=True)


async def get_user_id(
    user: Optional[User] = Depends(optional_active_user),
) -> Optional[uuid.UUID]:
    """Maps the request's bearer credential to a caller id, or None."""
    return user.id if user else None


async def get_caller_id(
    user_id: Optional[uuid.UUID] = Depends(get_user_id),
) -> uuid.UUID:
    if user_id is None:
        raise UnauthorizedError("Unauthorized")
    return user_id
