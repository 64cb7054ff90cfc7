"""Reusable field types for request schemas.

A field type is a type check followed by a list of rules. A failed type check
ends evaluation of that field. Otherwise every rule runs against the checked
value and each failing rule is reported on its own, in the order the rules are
listed, so a too-short username with a bad character yields two entries.
Date refinements also run when the value failed the format rule; a value they
cannot read fails them.

Refinements that compare against the current time read ``now`` from the
validation context when the caller provides one, so a fixed clock gives
repeatable results.
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from datetime import datetime
from datetime import timezone
from enum import Enum
import math
import re
from typing import Annotated
from typing import Any

from email_validator import EmailNotValidError
from email_validator import validate_email
from pydantic import AfterValidator
from pydantic import BaseModel
from pydantic import HttpUrl
from pydantic import PlainValidator
from pydantic import TypeAdapter
from pydantic import ValidationError
from pydantic import ValidationInfo
from pydantic_core import PydanticCustomError

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
PHONE_NUMBER_PATTERN = r"^[+]?[(]?[0-9]{1,4}[)]?[-\s.]?[(]?[0-9]{1,4}[)]?[-\s.]?[0-9]{1,9}$"
TIMEZONE_PATTERN = r"^[A-Za-z_]+/[A-Za-z_]+$"
TELEGRAM_HASH_PATTERN = r"^[a-f0-9]{64}$"

AUTH_DATE_MAX_AGE_SECONDS = 300
AUTH_DATE_MAX_SKEW_SECONDS = 60
MAX_AGE_YEARS = 120
SECONDS_PER_YEAR = 60 * 60 * 24 * 365.25

# pydantic error type carrying every failed rule of one field in ``ctx["messages"]``
CONSTRAINT_ERROR = "constraint_violations"

_ISO_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2})?$"
)
_HTTP_URL_ADAPTER: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class Rule:
    """One constraint on a type-checked value, reported independently."""

    message: str
    passes: Callable[[Any, ValidationInfo], bool]


@dataclass(frozen=True)
class Required:
    """Message reported when a required field is absent."""

    message: str


def current_time(info: ValidationInfo | None = None) -> datetime:
    """Return the evaluation clock: ``context["now"]`` when given, else UTC now."""
    context = info.context if info is not None else None
    if context and context.get("now") is not None:
        now = context["now"]
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now
    return datetime.now(timezone.utc)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 datetime with a time component; naive values are UTC.

    Raises:
        ValueError: the text is not such a datetime or falls outside the
            representable range once converted to UTC.
    """
    if not _ISO_DATETIME_RE.match(value):
        raise ValueError(f"Invalid ISO-8601 datetime: {value!r}")

    normalized = value
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    parsed = datetime.fromisoformat(normalized)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        raise ValueError(f"ISO-8601 datetime out of range: {value!r}") from None


def _read_datetime(value: str) -> datetime | None:
    try:
        return parse_iso_datetime(value)
    except ValueError:
        pass
    try:
        day = date.fromisoformat(value)
    except ValueError:
        return None
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


# rules


def min_length(limit: int, message: str) -> Rule:
    return Rule(message, lambda value, _info: len(value) >= limit)


def max_length(limit: int, message: str) -> Rule:
    return Rule(message, lambda value, _info: len(value) <= limit)


def matches(pattern: str, message: str) -> Rule:
    compiled = re.compile(pattern)
    return Rule(message, lambda value, _info: compiled.fullmatch(value) is not None)


def at_least(bound: float, message: str) -> Rule:
    return Rule(message, lambda value, _info: value >= bound)


def at_most(bound: float, message: str) -> Rule:
    return Rule(message, lambda value, _info: value <= bound)


def positive(message: str) -> Rule:
    return Rule(message, lambda value, _info: value > 0)


def integral(message: str) -> Rule:
    return Rule(message, lambda value, _info: isinstance(value, int) or value.is_integer())


def _is_email(value: str, _info: ValidationInfo) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _is_http_url(value: str, _info: ValidationInfo) -> bool:
    try:
        _HTTP_URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def _is_iso_datetime(value: str, _info: ValidationInfo) -> bool:
    try:
        parse_iso_datetime(value)
    except ValueError:
        return False
    return True


def _not_in_future(value: str, info: ValidationInfo) -> bool:
    moment = _read_datetime(value)
    return moment is not None and moment <= current_time(info)


def _within_max_age(value: str, info: ValidationInfo) -> bool:
    born = _read_datetime(value)
    if born is None:
        return False
    return (current_time(info) - born).total_seconds() / SECONDS_PER_YEAR <= MAX_AGE_YEARS


def _within_auth_window(value: float, info: ValidationInfo) -> bool:
    now = int(current_time(info).timestamp())
    return now - AUTH_DATE_MAX_AGE_SECONDS <= value <= now + AUTH_DATE_MAX_SKEW_SECONDS


def email_format(message: str) -> Rule:
    return Rule(message, _is_email)


def http_url(message: str) -> Rule:
    return Rule(message, _is_http_url)


def iso_datetime(message: str) -> Rule:
    return Rule(message, _is_iso_datetime)


def not_in_future(message: str) -> Rule:
    return Rule(message, _not_in_future)


def within_max_age(message: str) -> Rule:
    return Rule(message, _within_max_age)


def within_auth_window(message: str) -> Rule:
    return Rule(message, _within_auth_window)


def enforce(*rules: Rule) -> AfterValidator:
    """Run every rule and fail with all of their messages at once."""

    def check(value: Any, info: ValidationInfo) -> Any:
        failed = tuple(rule.message for rule in rules if not rule.passes(value, info))
        if failed:
            raise PydanticCustomError(
                CONSTRAINT_ERROR,
                "{message}",
                {"message": failed[0], "messages": failed},
            )
        return value

    return AfterValidator(check)


# type checks


def _string_check(label: str, *, strip: bool, lower: bool) -> Callable[[Any], str]:
    message = f"{label} must be a string"

    def check(value: Any) -> str:
        if not isinstance(value, str):
            raise PydanticCustomError("string_type", message)
        if lower:
            value = value.lower()
        if strip:
            value = value.strip()
        return value

    return check


def _number_check(label: str) -> Callable[[Any], float]:
    message = f"{label} must be a number"

    def check(value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PydanticCustomError("number_type", message)
        if isinstance(value, float) and not math.isfinite(value):
            raise PydanticCustomError("number_type", message)
        return value

    return check


def _integer_string_check(message: str) -> Callable[[Any], int]:
    def check(value: Any) -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if not isinstance(value, str):
            raise PydanticCustomError("int_type", message)
        try:
            return int(value, 10)
        except ValueError:
            raise PydanticCustomError("int_parsing", message) from None

    return check


def _boolean_check(label: str) -> Callable[[Any], bool]:
    message = f"{label} must be a boolean"

    def check(value: Any) -> bool:
        if not isinstance(value, bool):
            raise PydanticCustomError("bool_type", message)
        return value

    return check


def _choice_check(options: Iterable[Any], message: str) -> Callable[[Any], Any]:
    allowed = {option.value if isinstance(option, Enum) else option: option for option in options}

    def check(value: Any) -> Any:
        key = value.value if isinstance(value, Enum) else value
        if not isinstance(key, str) or key not in allowed:
            raise PydanticCustomError("enum", message)
        return allowed[key]

    return check


def _as_float(value: float) -> float:
    return float(value)


def _as_int(value: float) -> int:
    return int(value)


def _annotated(
    base: Any,
    check: Callable[[Any], Any],
    rules: tuple[Rule, ...],
    after: tuple[Any, ...],
    required: str | None,
):
    metadata: list[Any] = [PlainValidator(check)]
    if rules:
        metadata.append(enforce(*rules))
    metadata.extend(after)
    if required is not None:
        metadata.append(Required(required))
    return Annotated[(base, *metadata)]


# field type factories


def text(label: str, *rules: Rule, strip: bool = True, lower: bool = False, required: str | None = None):
    """String field; stripped (and optionally lower-cased) before the rules run."""
    return _annotated(str, _string_check(label, strip=strip, lower=lower), rules, (), required)


def number(label: str, *rules: Rule, required: str | None = None):
    """JSON number field normalized to ``float``."""
    return _annotated(float, _number_check(label), rules, (AfterValidator(_as_float),), required)


def whole_number(label: str, *rules: Rule, required: str | None = None):
    """JSON number field that must be integral; normalized to ``int``.

    The caller lists the ``integral`` rule so its message reads like the
    other rules of the field.
    """
    return _annotated(int, _number_check(label), rules, (AfterValidator(_as_int),), required)


def integer_string(message: str, *rules: Rule):
    """Query or path value parsed from a base-10 string."""
    return _annotated(int, _integer_string_check(message), rules, (), None)


def boolean(label: str):
    return _annotated(bool, _boolean_check(label), (), (), None)


def choice(options: Iterable[Any], message: str):
    """One of an enum's values (or a fixed set of strings)."""
    options = tuple(options)
    base = type(options[0]) if options and isinstance(options[0], Enum) else str
    return _annotated(base, _choice_check(options, message), (), (), None)


def required_field_messages(model: type[BaseModel]) -> dict[str, str]:
    """Map each required field's input name to its custom "missing" message."""
    messages: dict[str, str] = {}
    for name, field in model.model_fields.items():
        for item in field.metadata:
            if isinstance(item, Required):
                messages[field.alias or name] = item.message
    return messages


HttpUrlString = text(
    "URL",
    http_url("Invalid URL format"),
    max_length(2048, "URL must be at most 2048 characters"),
    strip=False,
)

Email = text(
    "Email",
    email_format("Invalid email format"),
    max_length(255, "Email must be at most 255 characters"),
    lower=True,
)

PhoneNumber = text(
    "Phone number",
    min_length(10, "Phone number must be at least 10 characters"),
    max_length(20, "Phone number must be at most 20 characters"),
    matches(PHONE_NUMBER_PATTERN, "Invalid phone number format"),
)

Timezone = text(
    "Timezone",
    min_length(1, "Timezone is required"),
    max_length(50, "Timezone must be at most 50 characters"),
    matches(TIMEZONE_PATTERN, "Timezone must be in IANA format (e.g., Europe/Kiev)"),
    strip=False,
)

DateOfBirth = text(
    "Date of birth",
    iso_datetime("Date of birth must be a valid ISO 8601 date"),
    not_in_future("Date of birth cannot be in the future"),
    within_max_age(f"Date of birth seems invalid (age > {MAX_AGE_YEARS} years)"),
    strip=False,
)

AchievedAt = text(
    "Achieved date",
    iso_datetime("Achieved date must be a valid ISO 8601 date"),
    not_in_future("Achieved date cannot be in the future"),
    strip=False,
)
