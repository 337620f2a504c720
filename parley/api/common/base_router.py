from typing import Any, Callable, List, Optional

from fastapi import APIRouter

from .decorators import handle_route_errors, log_route_call
from .responses import APIResponse


class BaseRouter:
    """Wraps an APIRouter so every function endpoint gets the same decorators."""

    def __init__(self, router: APIRouter, default_tags: Optional[List[str]] = None):
        self.router = router
        self.default_tags = list(default_tags or [])

    def function(
        self,
        path: str,
        *,
        tags: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """
        Registers an operation the way hosted functions expose it: the endpoint
        answers POST, OPTIONS answers the CORS preflight, and every other method
        falls through to a 405.

        The endpoint is wrapped in handle_route_errors and then log_route_call.
        """

        def decorator(endpoint: Callable[..., Any]) -> Callable[..., Any]:
            wrapped = log_route_call(handle_route_errors(endpoint))
            self.router.add_api_route(
                path,
                wrapped,
                methods=["POST"],
                tags=list(dict.fromkeys(self.default_tags + list(tags or []))),
                **kwargs,
            )
            self.router.add_api_route(
                path,
                _preflight,
                methods=["OPTIONS"],
                include_in_schema=False,
                name=f"{endpoint.__name__}_preflight",
            )
            return endpoint

        return decorator


async def _preflight():
    return APIResponse.preflight()
