"""Unit tests for the user request schemas and their normalization."""

from __future__ import annotations

from datetime import timedelta

import pytest

from wod_tracker.validation.registry import create_record_schema
from wod_tracker.validation.registry import create_user_schema
from wod_tracker.validation.registry import get_user_params_schema
from wod_tracker.validation.registry import login_schema
from wod_tracker.validation.registry import pagination_query_schema
from wod_tracker.validation.registry import update_user_schema

VALID_HASH = "0123456789abcdef" * 4


def _fields(outcome) -> list[str]:
    return [violation.field for violation in outcome.violations]


# create-user


def test_create_user_trims_and_omits_unsent_optional_fields() -> None:
    outcome = create_user_schema.evaluate({"id": 42, "first_name": "  Anna  ", "username": " anna_fit "})

    assert outcome.ok
    assert outcome.value == {"id": 42, "first_name": "Anna", "username": "anna_fit"}
    assert "role" not in outcome.value
    assert "language" not in outcome.value


def test_create_user_keeps_explicit_nulls_for_nullable_fields() -> None:
    outcome = create_user_schema.evaluate({"id": 1, "first_name": "Ivan", "username": None, "photo_url": None})

    assert outcome.ok
    assert outcome.value == {"id": 1, "first_name": "Ivan", "username": None, "photo_url": None}


def test_create_user_drops_unknown_keys() -> None:
    outcome = create_user_schema.evaluate({"id": 1, "first_name": "Ivan", "is_admin": True})

    assert outcome.ok
    assert outcome.value == {"id": 1, "first_name": "Ivan"}


def test_create_user_accepts_declared_role_and_language() -> None:
    outcome = create_user_schema.evaluate({"id": 7, "first_name": "Coach", "role": "coach", "language": "en"})

    assert outcome.ok
    assert outcome.value["role"] == "coach"
    assert outcome.value["language"] == "en"


def test_create_user_rejects_null_role_because_it_is_not_nullable() -> None:
    outcome = create_user_schema.evaluate({"id": 7, "first_name": "Coach", "role": None})

    assert not outcome.ok
    assert _fields(outcome) == ["role"]


@pytest.mark.parametrize(
    ("payload", "field"),
    [
        ({"first_name": "Anna"}, "id"),
        ({"id": 0, "first_name": "Anna"}, "id"),
        ({"id": -5, "first_name": "Anna"}, "id"),
        ({"id": "42", "first_name": "Anna"}, "id"),
        ({"id": 1.5, "first_name": "Anna"}, "id"),
        ({"id": 1, "first_name": "   "}, "first_name"),
        ({"id": 1, "first_name": "x" * 101}, "first_name"),
        ({"id": 1, "first_name": "Anna", "username": "ab"}, "username"),
        ({"id": 1, "first_name": "Anna", "username": "bad-name!"}, "username"),
        ({"id": 1, "first_name": "Anna", "photo_url": "not a url"}, "photo_url"),
        ({"id": 1, "first_name": "Anna", "photo_url": "ftp://files.example.com/a.png"}, "photo_url"),
        ({"id": 1, "first_name": "Anna", "role": "superuser"}, "role"),
        ({"id": 1, "first_name": "Anna", "language": "de"}, "language"),
    ],
)
def test_create_user_rejects_invalid_fields(payload: dict, field: str) -> None:
    outcome = create_user_schema.evaluate(payload)

    assert not outcome.ok
    assert _fields(outcome) == [field]


def test_username_reports_every_failed_rule() -> None:
    outcome = create_user_schema.evaluate({"id": 1, "first_name": "Anna", "username": "a!"})

    assert [(v.field, v.message, v.value) for v in outcome.violations] == [
        ("username", "Username must be at least 3 characters", "a!"),
        ("username", "Username can only contain letters, numbers, and underscores", "a!"),
    ]


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"first_name": "Anna"}, "User ID is required"),
        ({"id": 0, "first_name": "Anna"}, "User ID must be positive"),
        ({"id": "42", "first_name": "Anna"}, "User ID must be a number"),
        ({"id": 1.5, "first_name": "Anna"}, "User ID must be an integer"),
        ({"id": 1}, "First name is required"),
        ({"id": 1, "first_name": "Anna", "role": "superuser"}, "Role must be athlete, coach, or admin"),
    ],
)
def test_create_user_messages_name_the_field(payload: dict, message: str) -> None:
    outcome = create_user_schema.evaluate(payload)

    assert [v.message for v in outcome.violations] == [message]


def test_missing_and_mistyped_fields_omit_the_rejected_value() -> None:
    outcome = create_user_schema.evaluate({"first_name": 123})

    assert [(v.field, v.has_value) for v in outcome.violations] == [("id", False), ("first_name", False)]


def test_bound_violations_carry_the_rejected_value() -> None:
    outcome = create_user_schema.evaluate({"id": 1, "first_name": "Anna", "role": "superuser"})

    violation = outcome.violations[0]
    assert violation.has_value
    assert violation.value == "superuser"


def test_non_object_payload_is_reported_against_the_request() -> None:
    outcome = create_user_schema.evaluate(["not", "an", "object"])

    assert not outcome.ok
    assert _fields(outcome) == ["request"]


# update-user


@pytest.mark.parametrize("weight", [20, 300, 20.0, 299.99])
def test_update_user_weight_bounds_are_inclusive(weight: float) -> None:
    assert update_user_schema.evaluate({"id": 1, "weight_kg": weight}).ok


@pytest.mark.parametrize("weight", [19.999, 300.001, "80"])
def test_update_user_weight_outside_bounds_fails(weight: object) -> None:
    outcome = update_user_schema.evaluate({"id": 1, "weight_kg": weight})

    assert _fields(outcome) == ["weight_kg"]


@pytest.mark.parametrize("height", [50, 250])
def test_update_user_height_bounds_are_inclusive(height: int) -> None:
    assert update_user_schema.evaluate({"id": 1, "height_cm": height}).ok


@pytest.mark.parametrize("height", [49, 251, 170.5])
def test_update_user_height_outside_bounds_fails(height: object) -> None:
    outcome = update_user_schema.evaluate({"id": 1, "height_cm": height})

    assert _fields(outcome) == ["height_cm"]


@pytest.mark.parametrize(("years", "ok"), [(0, True), (80, True), (-1, False), (81, False)])
def test_update_user_experience_years_bounds(years: int, ok: bool) -> None:
    assert update_user_schema.evaluate({"id": 1, "experience_years": years}).ok is ok


def test_update_user_lowercases_and_trims_email() -> None:
    outcome = update_user_schema.evaluate({"id": 1, "email": "  Anna.Fit@Gmail.COM "})

    assert outcome.ok
    assert outcome.value == {"id": 1, "email": "anna.fit@gmail.com"}


def test_update_user_rejects_malformed_and_oversized_emails() -> None:
    oversized = "a" * 250 + "@gmail.com"

    assert _fields(update_user_schema.evaluate({"id": 1, "email": "not-an-email"})) == ["email"]
    oversized_outcome = update_user_schema.evaluate({"id": 1, "paypal_email": oversized})
    assert [(v.field, v.message) for v in oversized_outcome.violations] == [
        ("paypal_email", "Invalid email format"),
        ("paypal_email", "Email must be at most 255 characters"),
    ]


def test_update_user_collects_every_violation_in_declaration_order() -> None:
    outcome = update_user_schema.evaluate(
        {"id": 1, "email": "broken@", "weight_kg": 1000, "height_cm": 10}
    )

    assert not outcome.ok
    assert _fields(outcome) == ["email", "height_cm", "weight_kg"]


def test_update_user_abort_early_keeps_only_the_first_violation() -> None:
    outcome = update_user_schema.evaluate(
        {"id": 1, "height_cm": 10, "weight_kg": 1000, "email": "broken@"},
        abort_early=True,
    )

    assert _fields(outcome) == ["email"]


@pytest.mark.parametrize("timezone_name", ["Europe/Kiev", "America/New_York"])
def test_update_user_accepts_region_city_timezones(timezone_name: str) -> None:
    assert update_user_schema.evaluate({"id": 1, "timezone": timezone_name}).ok


@pytest.mark.parametrize("timezone_name", ["UTC", "Europe/Kiev/Extra", "Europe/Kyiv-1"])
def test_update_user_rejects_malformed_timezones(timezone_name: str) -> None:
    assert _fields(update_user_schema.evaluate({"id": 1, "timezone": timezone_name})) == ["timezone"]


def test_update_user_empty_timezone_fails_length_and_format() -> None:
    outcome = update_user_schema.evaluate({"id": 1, "timezone": ""})

    assert [v.message for v in outcome.violations] == [
        "Timezone is required",
        "Timezone must be in IANA format (e.g., Europe/Kiev)",
    ]


def test_update_user_phone_number_is_trimmed_and_pattern_checked() -> None:
    ok = update_user_schema.evaluate({"id": 1, "phone_number": " +380501234567 "})
    bad = update_user_schema.evaluate({"id": 1, "phone_number": "call me maybe"})

    assert ok.value == {"id": 1, "phone_number": "+380501234567"}
    assert _fields(bad) == ["phone_number"]


def test_update_user_bank_fields_have_independent_bounds() -> None:
    outcome = update_user_schema.evaluate(
        {"id": 1, "bank_account_number": "1234567", "bank_account_holder": "A", "bank_name": "Monobank"}
    )

    assert _fields(outcome) == ["bank_account_number", "bank_account_holder"]


def test_update_user_notifications_flag_must_be_boolean() -> None:
    assert update_user_schema.evaluate({"id": 1, "notifications_enabled": False}).ok
    assert _fields(update_user_schema.evaluate({"id": 1, "notifications_enabled": "yes"})) == [
        "notifications_enabled"
    ]


def test_update_user_date_of_birth_rules(now) -> None:
    past = (now - timedelta(days=365 * 30)).strftime("%Y-%m-%dT%H:%M:%SZ")
    future = (now + timedelta(days=1)).strftime("%Y-%m-%dT%H:%M:%SZ")
    ancient = (now - timedelta(days=365 * 121)).strftime("%Y-%m-%dT%H:%M:%SZ")

    assert update_user_schema.evaluate({"id": 1, "date_of_birth": past}, now=now).ok

    future_outcome = update_user_schema.evaluate({"id": 1, "date_of_birth": future}, now=now)
    assert future_outcome.violations[0].message == "Date of birth cannot be in the future"

    ancient_outcome = update_user_schema.evaluate({"id": 1, "date_of_birth": ancient}, now=now)
    assert ancient_outcome.violations[0].message == "Date of birth seems invalid (age > 120 years)"


@pytest.mark.parametrize("value", ["1990-05-17", "17/05/1990", "1990-05-17T25:00:00Z"])
def test_update_user_date_of_birth_requires_an_iso_datetime(value: str, now) -> None:
    outcome = update_user_schema.evaluate({"id": 1, "date_of_birth": value}, now=now)

    assert outcome.violations[0].field == "date_of_birth"
    assert outcome.violations[0].message == "Date of birth must be a valid ISO 8601 date"


def test_update_user_unreadable_date_of_birth_fails_every_date_rule(now) -> None:
    outcome = update_user_schema.evaluate({"id": 1, "date_of_birth": "someday"}, now=now)

    assert [v.message for v in outcome.violations] == [
        "Date of birth must be a valid ISO 8601 date",
        "Date of birth cannot be in the future",
        "Date of birth seems invalid (age > 120 years)",
    ]
    assert all(v.value == "someday" for v in outcome.violations)


def test_update_user_date_only_birthday_fails_only_the_format_rule(now) -> None:
    outcome = update_user_schema.evaluate({"id": 1, "date_of_birth": "1990-05-17"}, now=now)

    assert [v.message for v in outcome.violations] == ["Date of birth must be a valid ISO 8601 date"]


@pytest.mark.parametrize(
    "value",
    ["0001-01-01T00:00:00+01:00", "0001-01-01T00:00:00+00:01", "9999-12-31T23:59:59-01:00"],
)
def test_update_user_date_of_birth_outside_utc_range_is_a_violation(value: str, now) -> None:
    outcome = update_user_schema.evaluate({"id": 1, "date_of_birth": value}, now=now)

    assert not outcome.ok
    assert set(_fields(outcome)) == {"date_of_birth"}
    assert outcome.violations[0].message == "Date of birth must be a valid ISO 8601 date"


def test_update_user_messages_name_the_bound() -> None:
    outcome = update_user_schema.evaluate({"id": 1, "height_cm": 10, "gender": "x", "experience_years": -1})

    assert [(v.field, v.message) for v in outcome.violations] == [
        ("height_cm", "Height must be at least 50 cm"),
        ("gender", "Gender must be male, female, or other"),
        ("experience_years", "Experience years cannot be negative"),
    ]


def test_update_user_accepts_integral_floats_for_whole_numbers() -> None:
    outcome = update_user_schema.evaluate({"id": 1, "height_cm": 170.0})

    assert outcome.ok
    assert outcome.value == {"id": 1, "height_cm": 170}
    assert isinstance(outcome.value["height_cm"], int)


# login


def _login_payload(auth_date: int) -> dict:
    return {"id": 99, "first_name": "Olena", "auth_date": auth_date, "hash": VALID_HASH}


@pytest.mark.parametrize(("offset", "ok"), [(-300, True), (-301, False), (60, True), (61, False), (0, True)])
def test_login_auth_date_window(now, offset: int, ok: bool) -> None:
    auth_date = int(now.timestamp()) + offset

    outcome = login_schema.evaluate(_login_payload(auth_date), now=now)

    assert outcome.ok is ok
    if not ok:
        assert _fields(outcome) == ["auth_date"]
        assert outcome.violations[0].value == auth_date


@pytest.mark.parametrize(
    "candidate",
    ["f" * 64, "0" * 64, "0123456789abcdef" * 4, "deadbeef" * 8],
)
def test_login_accepts_any_lowercase_hex_hash_of_64_chars(now, candidate: str) -> None:
    payload = {**_login_payload(int(now.timestamp())), "hash": candidate}

    assert login_schema.evaluate(payload, now=now).ok


HEX_MESSAGE = "Hash must be a valid SHA-256 hex string"


@pytest.mark.parametrize(
    ("candidate", "messages"),
    [
        ("A" * 64, [HEX_MESSAGE]),
        ("g" * 64, [HEX_MESSAGE]),
        ("a" * 63, ["Invalid hash format", HEX_MESSAGE]),
        ("a" * 65, ["Invalid hash format", HEX_MESSAGE]),
        ("", ["Invalid hash format", HEX_MESSAGE]),
    ],
)
def test_login_rejects_malformed_hashes(now, candidate: str, messages: list[str]) -> None:
    payload = {**_login_payload(int(now.timestamp())), "hash": candidate}

    outcome = login_schema.evaluate(payload, now=now)

    assert set(_fields(outcome)) == {"hash"}
    assert [v.message for v in outcome.violations] == messages


def test_login_missing_hash_uses_its_required_message(now) -> None:
    payload = _login_payload(int(now.timestamp()))
    del payload["hash"]

    outcome = login_schema.evaluate(payload, now=now)

    assert [(v.field, v.message, v.has_value) for v in outcome.violations] == [
        ("hash", "Authentication hash is required", False)
    ]


def test_login_optional_fields_reject_null(now) -> None:
    payload = {**_login_payload(int(now.timestamp())), "username": None}

    assert _fields(login_schema.evaluate(payload, now=now)) == ["username"]


# create-record


def test_create_record_normalizes_strings_and_value(now) -> None:
    outcome = create_record_schema.evaluate(
        {"exercise_name": " Back Squat ", "record_type": "1RM", "value": 140, "unit": " kg "},
        now=now,
    )

    assert outcome.ok
    assert outcome.value == {"exercise_name": "Back Squat", "record_type": "1RM", "value": 140.0, "unit": "kg"}


@pytest.mark.parametrize(("value", "ok"), [(0.5, True), (100_000, True), (0, False), (-1, False), (100_001, False)])
def test_create_record_value_bounds(value: float, ok: bool) -> None:
    payload = {"exercise_name": "Fran", "record_type": "time", "value": value}

    assert create_record_schema.evaluate(payload).ok is ok


def test_create_record_rejects_future_achievement(now) -> None:
    payload = {
        "exercise_name": "Fran",
        "record_type": "time",
        "value": 180,
        "achieved_at": (now + timedelta(hours=1)).isoformat(),
    }

    outcome = create_record_schema.evaluate(payload, now=now)

    assert _fields(outcome) == ["achieved_at"]
    assert outcome.violations[0].message == "Achieved date cannot be in the future"


@pytest.mark.parametrize("achieved_at", ["9999-12-31T23:59:59-01:00", "9999-12-31T23:59:59-23:59"])
def test_create_record_achievement_outside_utc_range_is_a_violation(now, achieved_at: str) -> None:
    payload = {"exercise_name": "Fran", "record_type": "time", "value": 180, "achieved_at": achieved_at}

    outcome = create_record_schema.evaluate(payload, now=now)

    assert [v.message for v in outcome.violations] == [
        "Achieved date must be a valid ISO 8601 date",
        "Achieved date cannot be in the future",
    ]


def test_create_record_missing_fields_use_their_required_messages() -> None:
    outcome = create_record_schema.evaluate({"record_type": "time", "value": 180})

    assert [(v.field, v.message) for v in outcome.violations] == [("exercise_name", "Exercise name is required")]


# pagination-query and params


def test_pagination_fills_declared_defaults() -> None:
    outcome = pagination_query_schema.evaluate({})

    assert outcome.value == {"page": 1, "limit": 10, "order": "asc"}


def test_pagination_parses_strings_to_integers() -> None:
    outcome = pagination_query_schema.evaluate({"page": "2", "limit": "100", "sortBy": "first_name", "order": "desc"})

    assert outcome.value == {"page": 2, "limit": 100, "sortBy": "first_name", "order": "desc"}


@pytest.mark.parametrize("limit", ["101", "0", "-3"])
def test_pagination_limit_out_of_range_fails_with_value(limit: str) -> None:
    outcome = pagination_query_schema.evaluate({"limit": limit})

    assert _fields(outcome) == ["limit"]
    assert outcome.violations[0].value == limit


def test_pagination_limit_that_does_not_parse_is_a_type_violation() -> None:
    outcome = pagination_query_schema.evaluate({"limit": "abc"})

    assert _fields(outcome) == ["limit"]
    assert not outcome.violations[0].has_value
    assert outcome.violations[0].message == "Limit must be between 1 and 100"


def test_pagination_rejects_unknown_sort_order() -> None:
    assert _fields(pagination_query_schema.evaluate({"order": "random"})) == ["order"]


def test_user_params_parse_the_path_id() -> None:
    assert get_user_params_schema.evaluate({"userId": "42"}).value == {"userId": 42}
    assert _fields(get_user_params_schema.evaluate({"userId": "0"})) == ["userId"]
    assert _fields(get_user_params_schema.evaluate({"userId": "me"})) == ["userId"]
