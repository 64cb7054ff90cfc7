"""FastAPI dependencies that validate request payloads against registered schemas.

Invariants:
    - A request payload slot is overwritten only with a fully normalized value
    - validate_multiple evaluates every schema before deciding and commits
      nothing unless all targets pass
    - Field violations end the request with 400 VALIDATION_ERROR; schema
      faults end it with 500 INTERNAL_ERROR and are never re-raised raw
    - Schemas are evaluated in the thread pool, never on the event loop

Usage::

    @router.put("/users/{userId}")
    async def update_user(
        payloads: dict[str, Any] = Depends(
            validate_multiple(params=get_user_params_schema, body=update_user_schema)
        ),
    ): ...
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
import json
import logging
from typing import Any
from typing import Literal

from fastapi import Depends
from fastapi import Request
from fastapi import status
from starlette.concurrency import run_in_threadpool

from wod_tracker.core.config import settings_for_app
from wod_tracker.core.errors import APIError
from wod_tracker.core.errors import ApiErrorCode
from wod_tracker.core.errors import RequestValidationFailed
from wod_tracker.validation.outcome import SchemaFault
from wod_tracker.validation.outcome import ValidationOutcome
from wod_tracker.validation.outcome import merge_violations
from wod_tracker.validation.registry import Schema

logger = logging.getLogger(__name__)

ValidationTarget = Literal["body", "params", "query"]
TARGETS: tuple[ValidationTarget, ...] = ("body", "params", "query")

INTERNAL_VALIDATION_ERROR_MESSAGE = "Internal validation error"

_STATE_KEY = "validation_context"


@dataclass
class RequestContext:
    """The three independently addressable payload slots of one request."""

    body: Any = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)

    def get(self, target: ValidationTarget) -> Any:
        _check_target(target)
        return getattr(self, target)

    def commit(self, target: ValidationTarget, value: Any) -> None:
        _check_target(target)
        setattr(self, target, value)


def _check_target(target: str) -> None:
    if target not in TARGETS:
        raise ValueError(f"Unknown validation target {target!r}; expected one of {TARGETS}")


def _query_dict(request: Request) -> dict[str, Any]:
    query: dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        if key not in query:
            query[key] = value
        elif isinstance(query[key], list):
            query[key].append(value)
        else:
            query[key] = [query[key], value]
    return query


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise APIError(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=ApiErrorCode.INVALID_INPUT,
            message="Malformed JSON body",
        ) from None


async def request_context(request: Request) -> RequestContext:
    """Build the payload slots once per request and cache them on ``request.state``."""
    context = getattr(request.state, _STATE_KEY, None)
    if context is None:
        context = RequestContext(
            body=await _read_body(request),
            params=dict(request.path_params),
            query=_query_dict(request),
        )
        setattr(request.state, _STATE_KEY, context)
    return context


def _internal_error(request: Request, fault: SchemaFault) -> APIError:
    logger.error("Schema fault in %r on %s", fault.schema_name, request.url.path, exc_info=fault)
    message = INTERNAL_VALIDATION_ERROR_MESSAGE
    if settings_for_app(request.app).expose_internal_errors:
        message = f"{message}: {fault.cause}"
    return APIError(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ApiErrorCode.INTERNAL_ERROR,
        message=message,
    )


def _reject(request: Request, outcomes: list[ValidationOutcome], *, abort_early: bool) -> RequestValidationFailed:
    violations = merge_violations(outcomes)
    if abort_early:
        violations = violations[:1]
    logger.debug("Validation failed on %s with %d violation(s)", request.url.path, len(violations))
    return RequestValidationFailed([violation.to_detail() for violation in violations])


def validate(
    schema: Schema,
    target: ValidationTarget = "body",
    *,
    abort_early: bool = False,
) -> Callable[..., Awaitable[Any]]:
    """Build a dependency validating one payload slot; it returns the normalized value."""
    _check_target(target)

    async def dependency(request: Request, context: RequestContext = Depends(request_context)) -> Any:
        try:
            outcome = await run_in_threadpool(schema.evaluate, context.get(target), abort_early=abort_early)
        except SchemaFault as fault:
            raise _internal_error(request, fault) from fault

        if not outcome.ok:
            raise _reject(request, [outcome], abort_early=abort_early)

        context.commit(target, outcome.value)
        return outcome.value

    return dependency


def validate_multiple(
    *,
    body: Schema | None = None,
    params: Schema | None = None,
    query: Schema | None = None,
    abort_early: bool = False,
) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Build a dependency validating several slots concurrently.

    The dependency returns ``{target: normalized_value}`` for the validated
    targets, in body, params, query order.
    """
    schemas: dict[ValidationTarget, Schema] = {
        target: schema
        for target, schema in (("body", body), ("params", params), ("query", query))
        if schema is not None
    }
    if not schemas:
        raise ValueError("validate_multiple needs at least one schema")

    async def dependency(request: Request, context: RequestContext = Depends(request_context)) -> dict[str, Any]:
        results = await asyncio.gather(
            *(run_in_threadpool(schema.evaluate, context.get(target)) for target, schema in schemas.items()),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, SchemaFault):
                raise _internal_error(request, result) from result
            if isinstance(result, BaseException):
                raise result

        outcomes: dict[ValidationTarget, ValidationOutcome] = dict(zip(schemas, results))
        failed = [outcome for outcome in outcomes.values() if not outcome.ok]
        if failed:
            raise _reject(request, failed, abort_early=abort_early)

        for target, outcome in outcomes.items():
            context.commit(target, outcome.value)
        return {target: outcome.value for target, outcome in outcomes.items()}

    return dependency


def validate_body(schema: Schema) -> Callable[..., Awaitable[Any]]:
    return validate(schema, "body")


def validate_params(schema: Schema) -> Callable[..., Awaitable[Any]]:
    return validate(schema, "params")


def validate_query(schema: Schema) -> Callable[..., Awaitable[Any]]:
    return validate(schema, "query")
