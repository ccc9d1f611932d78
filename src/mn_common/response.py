"""Unified API response wrapper.

Handlers and exception handlers produce a tagged result, Ok or Err, which is
rendered into one envelope at the HTTP boundary:
{
    "success": true,
    "code": 0,              // 0=success, non-0=error code
    "message": "success",
    "data": { ... },        // null on error
    "errors": null,         // [{"field": ..., "message": ...}] on validation errors
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.mn_common.errors import HTTP_STATUS_BY_KIND, AppError, ErrorKind


class FieldError(BaseModel):
    field: str
    message: str


class ApiResponse(BaseModel):
    success: bool = True
    code: int = 0
    message: str = "success"
    data: Any = None
    errors: list[FieldError] | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


@dataclass(frozen=True)
class Ok:
    data: Any = None
    message: str = "success"


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    code: int
    message: str
    errors: list[FieldError] | None = None

    @classmethod
    def from_error(cls, exc: AppError) -> "Err":
        return cls(kind=exc.kind, code=exc.code, message=exc.message)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


Result = Ok | Err


def render(result: Result, request_id: str | None = None) -> ApiResponse:
    """Serialize a tagged result into the response envelope."""
    if isinstance(result, Ok):
        resp = ApiResponse(success=True, code=0, message=result.message, data=result.data)
    else:
        resp = ApiResponse(
            success=False,
            code=result.code,
            message=result.message,
            data=None,
            errors=result.errors,
        )
    if request_id is not None:
        resp.request_id = request_id
    return resp


def success_response(data: Any = None, message: str = "success") -> ApiResponse:
    return render(Ok(data=data, message=message))
