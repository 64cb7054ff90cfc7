"""Unit tests for the user ORM models and role helpers."""

from __future__ import annotations

from wod_tracker.db.models import User
from wod_tracker.db.models import UserRecord
from wod_tracker.db.models.user import DEFAULT_LANGUAGE
from wod_tracker.db.models.user import DEFAULT_ROLE
from wod_tracker.db.models.user import UserLanguage
from wod_tracker.db.models.user import UserRole
from wod_tracker.db.models.user import has_elevated_privileges
from wod_tracker.db.models.user import is_admin
from wod_tracker.db.models.user import is_coach


def test_enum_values_match_database_labels() -> None:
    assert [role.value for role in UserRole] == ["athlete", "coach", "admin"]
    assert [language.value for language in UserLanguage] == ["uk", "en", "ru"]
    assert DEFAULT_ROLE is UserRole.ATHLETE
    assert DEFAULT_LANGUAGE is UserLanguage.UK


def test_role_predicates() -> None:
    athlete = User(id=1, first_name="A", role=UserRole.ATHLETE)
    coach = User(id=2, first_name="C", role=UserRole.COACH)
    admin = User(id=3, first_name="D", role=UserRole.ADMIN)

    assert not is_coach(athlete)
    assert is_coach(coach)
    assert is_admin(admin)
    assert not has_elevated_privileges(athlete)
    assert has_elevated_privileges(coach)
    assert has_elevated_privileges(admin)


def test_tables_and_relationship_are_mapped() -> None:
    assert User.__tablename__ == "users"
    assert UserRecord.__tablename__ == "user_records"

    record_fk = next(iter(UserRecord.__table__.c.user_id.foreign_keys))
    assert record_fk.target_fullname == "users.id"
    assert record_fk.ondelete == "CASCADE"
    assert User.records.property.mapper.class_ is UserRecord


def test_user_columns_follow_request_limits() -> None:
    columns = User.__table__.c

    assert columns.username.type.length == 50
    assert columns.first_name.type.length == 100
    assert columns.photo_url.type.length == 2048
    assert columns.bank_account_number.type.length == 34
    assert not columns.first_name.nullable
    assert columns.username.nullable
