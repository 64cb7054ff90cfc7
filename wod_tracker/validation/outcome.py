"""Result types returned by schema evaluation."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from pydantic_core import ErrorDetails

from wod_tracker.core.errors import format_location
from wod_tracker.schemas.fields import CONSTRAINT_ERROR
from wod_tracker.schemas.error import ErrorDetail

# pydantic error types that mean "wrong kind of value" rather than a failed bound
_TYPE_MISMATCH_TYPES = frozenset({"missing", "int_from_float"})
_TYPE_MISMATCH_SUFFIXES = ("_type", "_parsing")


class SchemaFault(Exception):
    """The validation engine itself failed while evaluating a schema."""

    def __init__(self, schema_name: str, cause: BaseException) -> None:
        super().__init__(f"Schema {schema_name!r} failed during evaluation: {cause}")
        self.schema_name = schema_name
        self.cause = cause


@dataclass(frozen=True)
class FieldViolation:
    """One field failing one constraint."""

    field: str
    message: str
    value: Any = None
    has_value: bool = False

    @classmethod
    def from_pydantic(
        cls,
        error: ErrorDetails,
        required_messages: Mapping[str, str] | None = None,
    ) -> tuple[FieldViolation, ...]:
        """Translate one pydantic error; a rule error expands to one entry per failed rule."""
        location = format_location(error.get("loc", ()))
        error_type = error.get("type", "")

        if error_type == "missing":
            message = (required_messages or {}).get(location, error["msg"])
            return (cls(field=location, message=message),)

        is_type_mismatch = error_type in _TYPE_MISMATCH_TYPES or error_type.endswith(_TYPE_MISMATCH_SUFFIXES)
        if is_type_mismatch or "input" not in error:
            return (cls(field=location, message=error["msg"]),)

        messages = (error["msg"],)
        if error_type == CONSTRAINT_ERROR:
            messages = tuple(error.get("ctx", {}).get("messages") or messages)
        return tuple(
            cls(field=location, message=message, value=error["input"], has_value=True) for message in messages
        )

    def to_detail(self) -> ErrorDetail:
        if self.has_value:
            return ErrorDetail(field=self.field, message=self.message, value=self.value)
        return ErrorDetail(field=self.field, message=self.message)


@dataclass(frozen=True)
class ValidationOutcome:
    """Either a normalized value or the ordered violations that rejected the input."""

    value: Any = None
    violations: tuple[FieldViolation, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.violations

    @classmethod
    def success(cls, value: Any) -> ValidationOutcome:
        return cls(value=value)

    @classmethod
    def failure(cls, violations: Iterable[FieldViolation]) -> ValidationOutcome:
        violations = tuple(violations)
        if not violations:
            raise ValueError("A failed outcome needs at least one violation")
        return cls(violations=violations)

    def details(self) -> list[ErrorDetail]:
        return [violation.to_detail() for violation in self.violations]


def merge_violations(outcomes: Sequence[ValidationOutcome]) -> tuple[FieldViolation, ...]:
    """Concatenate violations of several outcomes, preserving their order."""
    return tuple(violation for outcome in outcomes for violation in outcome.violations)
