import json
import logging
from typing import Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from .exceptions import BadRequestError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def json_body(model: Type[ModelT]):
    """
    Builds a dependency that reads the JSON body and validates it against model.

    Parsing happens inside the dependency rather than through a FastAPI body
    parameter, so it only runs after the caller dependency declared before it has
    authenticated the request.
    """

    async def dependency(request: Request) -> ModelT:
        body = await request.body()
        try:
            # An empty body is read as an empty object
            payload = json.loads(body) if body.strip() else {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.info(f"Rejected request with malformed JSON: {e}")
            raise BadRequestError("Invalid JSON in request body")

        if not isinstance(payload, dict):
            raise BadRequestError("Request body must be a JSON object")

        try:
            return model.model_validate(payload)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False)
            first = errors[0]
            field = ".".join(str(part) for part in first["loc"]) or "body"
            raise BadRequestError(
                f"{field}: {first['msg']}", details={"errors": errors}
            )

    return dependency
