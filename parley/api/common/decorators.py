import asyncio
import logging
from functools import wraps

from fastapi import HTTPException, status

from parley.core.config import settings
from parley.services.exceptions import ServiceError

from .exceptions import RequestTimeoutError, handle_service_error

logger = logging.getLogger(__name__)


def log_route_call(func):
    """
    A decorator to log the entry and exit of a route function.
    It logs the function name, arguments, and whether it completed successfully or raised an error.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        route_logger = logging.getLogger(func.__module__)

        # Request bodies are logged by model name only, never by content
        logged_kwargs = {
            k: (type(v).__name__ if k == "request_data" else repr(v))
            for k, v in kwargs.items()
            if not k.endswith("_service")
        }

        route_logger.info(f"Entering route: {func.__name__} (kwargs: {logged_kwargs})")
        try:
            result = await func(*args, **kwargs)
            route_logger.info(f"Successfully exited route: {func.__name__}")
            return result
        except Exception as e:
            route_logger.error(
                f"Error during route: {func.__name__}. Exception: {type(e).__name__} - {e}",
                exc_info=False,
            )
            raise

    return wrapper


def handle_route_errors(func):
    """
    A decorator to standardize error handling in API routes.

    Runs the route under the configured request timeout, translates service-layer
    exceptions through handle_service_error and turns anything unexpected into a
    generic 500 after logging it.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await asyncio.wait_for(
                func(*args, **kwargs), timeout=settings.REQUEST_TIMEOUT_SECONDS
            )
        except ServiceError as e:
            logger.error(f"Service error in {func.__name__} route: {e}", exc_info=False)
            handle_service_error(e)
        except HTTPException:
            raise
        except asyncio.TimeoutError:
            # The session is closed without commit, so the transaction rolls back
            logger.error(
                f"Route {func.__name__} exceeded {settings.REQUEST_TIMEOUT_SECONDS}s"
            )
            raise RequestTimeoutError()
        except Exception as e:
            logger.error(f"Unexpected error in {func.__name__} route: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An unexpected server error occurred.",
            )

    return wrapper
