"""Named request schemas and their evaluation entry point.

A :class:`Schema` binds a logical request shape to a pydantic model and turns
pydantic's exception into a :class:`ValidationOutcome`, so callers branch on a
value instead of catching validation errors.

Invariants:
    - The registry is built once at import and is read-only afterwards.
    - Evaluation never mutates its input and has no side effects.
    - Normalized output re-evaluates to itself.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError

from wod_tracker.schemas.fields import required_field_messages
from wod_tracker.schemas.user import CreateUser
from wod_tracker.schemas.user import CreateUserRecord
from wod_tracker.schemas.user import GetUserParams
from wod_tracker.schemas.user import PaginationQuery
from wod_tracker.schemas.user import TelegramLogin
from wod_tracker.schemas.user import UpdateUser
from wod_tracker.validation.outcome import FieldViolation
from wod_tracker.validation.outcome import SchemaFault
from wod_tracker.validation.outcome import ValidationOutcome


@dataclass(frozen=True)
class Schema:
    """Immutable, shareable request shape."""

    name: str
    model: type[BaseModel]
    required_messages: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "required_messages", MappingProxyType(required_field_messages(self.model)))

    def evaluate(
        self,
        raw_input: Any,
        *,
        abort_early: bool = False,
        now: datetime | None = None,
    ) -> ValidationOutcome:
        """Validate ``raw_input`` and return its normalized form or its violations.

        Raises:
            SchemaFault: evaluation failed for a reason other than bad input.
        """
        context = {"now": now} if now is not None else None
        try:
            instance = self.model.model_validate(raw_input, context=context)
            value = self.normalize(instance)
        except ValidationError as exc:
            violations = [
                violation
                for error in exc.errors(include_url=False)
                for violation in FieldViolation.from_pydantic(error, self.required_messages)
            ]
            if abort_early:
                violations = violations[:1]
            return ValidationOutcome.failure(violations)
        except Exception as exc:
            raise SchemaFault(self.name, exc) from exc

        return ValidationOutcome.success(value)

    def normalize(self, instance: BaseModel) -> dict[str, Any]:
        """Dump a validated instance, omitting optional fields the client never sent."""
        absent = {
            name
            for name, model_field in type(instance).model_fields.items()
            if name not in instance.model_fields_set and model_field.default is None
        }
        return instance.model_dump(mode="json", by_alias=True, exclude=absent)


_SCHEMAS: dict[str, Schema] = {
    schema.name: schema
    for schema in (
        Schema("create-user", CreateUser),
        Schema("update-user", UpdateUser),
        Schema("login", TelegramLogin),
        Schema("create-record", CreateUserRecord),
        Schema("pagination-query", PaginationQuery),
        Schema("get-user-params", GetUserParams),
    )
}

SCHEMAS: Mapping[str, Schema] = MappingProxyType(_SCHEMAS)


def define(shape_name: str) -> Schema:
    """Return the registered schema for a logical request shape."""
    try:
        return SCHEMAS[shape_name]
    except KeyError:
        raise KeyError(f"Unknown request shape {shape_name!r}; known: {', '.join(sorted(SCHEMAS))}") from None


create_user_schema = define("create-user")
update_user_schema = define("update-user")
login_schema = define("login")
create_record_schema = define("create-record")
pagination_query_schema = define("pagination-query")
get_user_params_schema = define("get-user-params")
