"""Error body shape shared by every handler.

Errors are rendered as:
{
    "error": "Token version mismatch",   // human-readable message
    "code": 1006,                        // AppError code (absent for generic 500s)
    "details": ...                       // optional, validation failures etc.
}

Success bodies are plain JSON (model or list), camelCase keys.
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    code: int | None = None
    details: Any = None


def error_response(message: str, code: int | None = None, details: Any = None) -> dict[str, Any]:
    return ErrorResponse(error=message, code=code, details=details).model_dump(exclude_none=True)
