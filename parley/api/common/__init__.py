# This file makes parley/api/common a Python package

from .base_router import BaseRouter
from .decorators import handle_route_errors, log_route_call
from .exceptions import (
    APIException,
    BadRequestError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
    RequestTimeoutError,
    UnauthorizedError,
    handle_service_error,
    register_exception_handlers,
)
from .request_body import json_body
from .responses import APIResponse

__all__ = [
    "APIResponse",
    "log_route_call",
    "handle_route_errors",
    "APIException",
    "NotFoundError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "InternalServerError",
    "RequestTimeoutError",
    "handle_service_error",
    "register_exception_handlers",
    "json_body",
    "BaseRouter",
]
