"""User API routes.

Inputs are validated and normalized by the gate; controllers are not
written yet, so every route answers 501 once its input passes.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi import Depends

from wod_tracker.core.errors import NotImplementedAPIError
from wod_tracker.validation.gate import validate
from wod_tracker.validation.gate import validate_body
from wod_tracker.validation.gate import validate_multiple
from wod_tracker.validation.gate import validate_params
from wod_tracker.validation.gate import validate_query
from wod_tracker.validation.registry import create_record_schema
from wod_tracker.validation.registry import create_user_schema
from wod_tracker.validation.registry import get_user_params_schema
from wod_tracker.validation.registry import pagination_query_schema
from wod_tracker.validation.registry import update_user_schema

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("")
async def create_user_endpoint(
    payload: dict[str, Any] = Depends(validate_body(create_user_schema)),
) -> None:
    """Register a user."""
    raise NotImplementedAPIError()


@router.get("")
async def list_users_endpoint(
    query: dict[str, Any] = Depends(validate_query(pagination_query_schema)),
) -> None:
    """List users with pagination."""
    raise NotImplementedAPIError()


@router.get("/{userId}")
async def get_user_endpoint(
    params: dict[str, Any] = Depends(validate_params(get_user_params_schema)),
) -> None:
    """Get a single user profile."""
    raise NotImplementedAPIError()


@router.put("/{userId}")
async def update_user_endpoint(
    payloads: dict[str, Any] = Depends(
        validate_multiple(params=get_user_params_schema, body=update_user_schema)
    ),
) -> None:
    """Update a user profile."""
    raise NotImplementedAPIError()


@router.post("/{userId}/records")
async def create_user_record_endpoint(
    params: dict[str, Any] = Depends(validate(get_user_params_schema, "params")),
    payload: dict[str, Any] = Depends(validate(create_record_schema, "body")),
) -> None:
    """Log a personal record for a user."""
    raise NotImplementedAPIError()
