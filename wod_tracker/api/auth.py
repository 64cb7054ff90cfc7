"""Authentication API routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi import Depends

from wod_tracker.core.errors import NotImplementedAPIError
from wod_tracker.validation.gate import validate_body
from wod_tracker.validation.registry import login_schema

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/telegram")
async def telegram_login_endpoint(
    payload: dict[str, Any] = Depends(validate_body(login_schema)),
) -> None:
    """Exchange Telegram Login Widget data for a session."""
    # TODO: verify the widget hash against the bot token and issue access/refresh tokens.
    raise NotImplementedAPIError(message="Telegram login is not implemented yet")
