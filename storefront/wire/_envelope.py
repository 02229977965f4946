"""
Envelope — the JSON shape of every response.

    {
      "success": true,
      "data": {...},
      "message": "Login successful",
      "error": null,
      "meta": {"timestamp": "...", "version": "v3"}
    }
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from storefront._types import AppError


API_VERSION = "v3"

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
"""Decimal in Python, a JSON number on the wire."""


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ErrorBody(WireModel):
    code: str
    message: str
    details: Any = None


class Meta(WireModel):
    timestamp: datetime
    version: str = API_VERSION


class Envelope(WireModel):
    success: bool
    data: Any = None
    message: str | None = None
    error: ErrorBody | None = None
    meta: Meta

    @classmethod
    def ok(cls, data: Any, message: str | None, now: datetime) -> Envelope:
        return cls(success=True, data=data, message=message, meta=Meta(timestamp=now))

    @classmethod
    def fail(cls, error: AppError, now: datetime) -> Envelope:
        return cls(
            success=False,
            message=error.message,
            error=ErrorBody(code=error.kind.code, message=error.message, details=error.details),
            meta=Meta(timestamp=now),
        )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = (
    "API_VERSION",
    "Money",
    "WireModel",
    "ErrorBody",
    "Meta",
    "Envelope",
)
