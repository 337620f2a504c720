from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class APIResponse:
    @staticmethod
    def success(data: Any, status_code: int = 200) -> JSONResponse:
        """Serializes the operation's result object as the response body."""
        return JSONResponse(status_code=status_code, content=jsonable_encoder(data))

    @staticmethod
    def error(
        message: str,
        status_code: int = 400,
        details: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> JSONResponse:
        error: dict[str, Any] = {"message": message}
        if details:
            error["details"] = jsonable_encoder(details)
        return JSONResponse(
            status_code=status_code, content={"error": error}, headers=headers
        )

    @staticmethod
    def preflight() -> PlainTextResponse:
        return PlainTextResponse("ok", headers=CORS_HEADERS)
