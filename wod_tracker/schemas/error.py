"""Error envelope schemas shared across API handlers."""

from __future__ import annotations

from typing import Any
from typing import Literal

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Single field-level validation issue.

    ``value`` is only serialized when it was explicitly provided, so a
    rejected ``null`` stays distinguishable from an omitted value.
    """

    field: str
    message: str
    value: Any = None


class ErrorObject(BaseModel):
    """Canonical error payload object."""

    message: str
    code: str
    details: list[ErrorDetail] | None = None
    stack: str | None = None


class ErrorResponse(BaseModel):
    """Top-level API error response envelope."""

    success: Literal[False] = False
    error: ErrorObject

    def to_content(self) -> dict[str, Any]:
        """Serialize for a JSON response, keeping only explicitly set keys."""
        return self.model_dump(mode="json", exclude_unset=True)
