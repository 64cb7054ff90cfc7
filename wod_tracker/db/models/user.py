"""SQLAlchemy model for WOD Tracker users."""

from __future__ import annotations

from datetime import date
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger
from sqlalchemy import Boolean
from sqlalchemy import CheckConstraint
from sqlalchemy import Date
from sqlalchemy import DateTime
from sqlalchemy import Integer
from sqlalchemy import Numeric
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import SmallInteger
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import UniqueConstraint
from sqlalchemy import text
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.orm import relationship


class Base(DeclarativeBase):
    """Declarative base for WOD Tracker ORM models."""


class UserRole(str, Enum):
    ATHLETE = "athlete"
    COACH = "coach"
    ADMIN = "admin"


class UserLevel(str, Enum):
    SCALED = "scaled"
    INTERMEDIATE = "intermediate"
    RX = "rx"


class UserGender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class UserLanguage(str, Enum):
    UK = "uk"
    EN = "en"
    RU = "ru"


class PayoutMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    STRIPE = "stripe"


DEFAULT_ROLE = UserRole.ATHLETE
DEFAULT_LEVEL = UserLevel.SCALED
DEFAULT_LANGUAGE = UserLanguage.UK
DEFAULT_TIMEZONE = "Europe/Kiev"

ELEVATED_ROLES = frozenset({UserRole.COACH, UserRole.ADMIN})


def _pg_enum(enum_cls: type[Enum], name: str) -> postgresql.ENUM:
    return postgresql.ENUM(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        create_type=False,
    )


if TYPE_CHECKING:
    from wod_tracker.db.models.record import UserRecord


class User(Base):
    """Telegram-backed user account, keyed by the Telegram user id."""

    __tablename__ = "users"
    __table_args__ = (
        PrimaryKeyConstraint("id", name="pk_users"),
        UniqueConstraint("username", name="uq_users_username"),
        CheckConstraint("height_cm IS NULL OR height_cm BETWEEN 50 AND 250", name="ck_users_height_cm"),
        CheckConstraint("weight_kg IS NULL OR weight_kg BETWEEN 20 AND 300", name="ck_users_weight_kg"),
        CheckConstraint(
            "experience_years IS NULL OR experience_years BETWEEN 0 AND 80",
            name="ck_users_experience_years",
        ),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    username: Mapped[str | None] = mapped_column(String(50), nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        _pg_enum(UserRole, "user_role"),
        nullable=False,
        default=DEFAULT_ROLE,
        server_default=text(f"'{DEFAULT_ROLE.value}'"),
    )
    level: Mapped[UserLevel] = mapped_column(
        _pg_enum(UserLevel, "user_level"),
        nullable=False,
        default=DEFAULT_LEVEL,
        server_default=text(f"'{DEFAULT_LEVEL.value}'"),
    )
    height_cm: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    weight_kg: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[UserGender | None] = mapped_column(_pg_enum(UserGender, "user_gender"), nullable=True)
    experience_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    goals: Mapped[str | None] = mapped_column(Text, nullable=True)
    injuries: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[UserLanguage] = mapped_column(
        _pg_enum(UserLanguage, "user_language"),
        nullable=False,
        default=DEFAULT_LANGUAGE,
        server_default=text(f"'{DEFAULT_LANGUAGE.value}'"),
    )
    timezone: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_TIMEZONE,
        server_default=text(f"'{DEFAULT_TIMEZONE}'"),
    )
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    bank_account_number: Mapped[str | None] = mapped_column(String(34), nullable=True)
    bank_account_holder: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    paypal_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payout_method: Mapped[PayoutMethod | None] = mapped_column(
        _pg_enum(PayoutMethod, "payout_method"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    last_active_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    records: Mapped[list["UserRecord"]] = relationship("UserRecord", back_populates="user")


def is_coach(user: User) -> bool:
    return user.role == UserRole.COACH


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def has_elevated_privileges(user: User) -> bool:
    """Coaches and admins can manage workouts and communities."""
    return user.role in ELEVATED_ROLES
