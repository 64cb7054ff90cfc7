"""Pydantic schemas for user-related API payloads.

Field declaration order is significant: validation failures are reported in
this order. Optional fields default to ``None`` and are left out of the
normalized payload when the client did not send them; only explicit defaults
(pagination) are filled in. A field typed ``X | None`` accepts an explicit
null; one typed ``X = None`` may be omitted but rejects null.
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from wod_tracker.db.models.user import PayoutMethod
from wod_tracker.db.models.user import UserGender
from wod_tracker.db.models.user import UserLanguage
from wod_tracker.db.models.user import UserLevel
from wod_tracker.db.models.user import UserRole
from wod_tracker.schemas.fields import TELEGRAM_HASH_PATTERN
from wod_tracker.schemas.fields import USERNAME_PATTERN
from wod_tracker.schemas.fields import AchievedAt
from wod_tracker.schemas.fields import DateOfBirth
from wod_tracker.schemas.fields import Email
from wod_tracker.schemas.fields import HttpUrlString
from wod_tracker.schemas.fields import PhoneNumber
from wod_tracker.schemas.fields import Timezone
from wod_tracker.schemas.fields import at_least
from wod_tracker.schemas.fields import at_most
from wod_tracker.schemas.fields import boolean
from wod_tracker.schemas.fields import choice
from wod_tracker.schemas.fields import integer_string
from wod_tracker.schemas.fields import integral
from wod_tracker.schemas.fields import matches
from wod_tracker.schemas.fields import max_length
from wod_tracker.schemas.fields import min_length
from wod_tracker.schemas.fields import number
from wod_tracker.schemas.fields import positive
from wod_tracker.schemas.fields import text
from wod_tracker.schemas.fields import whole_number
from wod_tracker.schemas.fields import within_auth_window

Role = choice(UserRole, "Role must be athlete, coach, or admin")
Level = choice(UserLevel, "Level must be scaled, intermediate, or rx")
Gender = choice(UserGender, "Gender must be male, female, or other")
Language = choice(UserLanguage, "Language must be uk, en, or ru")
Payout = choice(PayoutMethod, "Payout method must be bank_transfer, paypal, or stripe")
SortOrder = choice(("asc", "desc"), "Order must be asc or desc")

UserId = whole_number(
    "User ID",
    integral("User ID must be an integer"),
    positive("User ID must be positive"),
    required="User ID is required",
)
TelegramId = whole_number(
    "Telegram ID",
    integral("Telegram ID must be an integer"),
    positive("Telegram ID must be positive"),
    required="Telegram ID is required",
)
FirstName = text(
    "First name",
    min_length(1, "First name must be at least 1 character"),
    max_length(100, "First name must be at most 100 characters"),
    required="First name is required",
)
LastName = text("Last name", max_length(100, "Last name must be at most 100 characters"))
Username = text(
    "Username",
    min_length(3, "Username must be at least 3 characters"),
    max_length(50, "Username must be at most 50 characters"),
    matches(USERNAME_PATTERN, "Username can only contain letters, numbers, and underscores"),
)
TelegramUsername = text(
    "Username",
    min_length(3, "Username must be at least 3 characters"),
    max_length(50, "Username must be at most 50 characters"),
)

HeightCm = whole_number(
    "Height",
    integral("Height must be an integer"),
    at_least(50, "Height must be at least 50 cm"),
    at_most(250, "Height must be at most 250 cm"),
)
WeightKg = number(
    "Weight",
    at_least(20, "Weight must be at least 20 kg"),
    at_most(300, "Weight must be at most 300 kg"),
)
ExperienceYears = whole_number(
    "Experience years",
    integral("Experience years must be an integer"),
    at_least(0, "Experience years cannot be negative"),
    at_most(80, "Experience years must be at most 80"),
)
Goals = text("Goals", max_length(1000, "Goals must be at most 1000 characters"))
Injuries = text("Injuries", max_length(1000, "Injuries must be at most 1000 characters"))
Notes = text("Notes", max_length(2000, "Notes must be at most 2000 characters"))
NotificationsEnabled = boolean("Notifications setting")
BankAccountNumber = text(
    "Bank account number",
    min_length(8, "Bank account number must be at least 8 characters"),
    max_length(34, "Bank account number must be at most 34 characters"),
)
BankAccountHolder = text(
    "Bank account holder name",
    min_length(2, "Bank account holder name must be at least 2 characters"),
    max_length(100, "Bank account holder name must be at most 100 characters"),
)
BankName = text(
    "Bank name",
    min_length(2, "Bank name must be at least 2 characters"),
    max_length(100, "Bank name must be at most 100 characters"),
)

AuthDate = whole_number(
    "Authentication date",
    integral("Authentication date must be an integer"),
    positive("Authentication date must be positive"),
    within_auth_window("Authentication date is invalid or expired"),
    required="Authentication date is required",
)
TelegramHash = text(
    "Hash",
    min_length(64, "Invalid hash format"),
    max_length(64, "Invalid hash format"),
    matches(TELEGRAM_HASH_PATTERN, "Hash must be a valid SHA-256 hex string"),
    strip=False,
    required="Authentication hash is required",
)

ExerciseName = text(
    "Exercise name",
    min_length(1, "Exercise name must be at least 1 character"),
    max_length(100, "Exercise name must be at most 100 characters"),
    required="Exercise name is required",
)
RecordType = text(
    "Record type",
    min_length(1, "Record type must be at least 1 character"),
    max_length(50, "Record type must be at most 50 characters"),
    required="Record type is required",
)
RecordValue = number(
    "Record value",
    positive("Record value must be positive"),
    at_most(100_000, "Record value seems unreasonably high"),
    required="Record value is required",
)
Unit = text("Unit", max_length(20, "Unit must be at most 20 characters"))

PAGE_MESSAGE = "Page must be a positive number"
LIMIT_MESSAGE = "Limit must be between 1 and 100"

PageNumber = integer_string(PAGE_MESSAGE, positive(PAGE_MESSAGE))
PageLimit = integer_string(LIMIT_MESSAGE, positive(LIMIT_MESSAGE), at_most(100, LIMIT_MESSAGE))
SortField = text("Sort field", max_length(50, "Sort field must be at most 50 characters"), strip=False)
PathUserId = integer_string("User ID must be a positive integer", positive("User ID must be a positive integer"))


class RequestSchema(BaseModel):
    """Base for inbound payload schemas: unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class CreateUser(RequestSchema):
    """Payload to register a user from Telegram data."""

    id: UserId
    first_name: FirstName
    username: Username | None = None
    last_name: LastName | None = None
    photo_url: HttpUrlString | None = None
    role: Role = None
    language: Language = None


class UpdateUser(RequestSchema):
    """Payload to update a user profile; everything but ``id`` is optional."""

    id: UserId
    username: Username | None = None
    first_name: FirstName = None
    last_name: LastName | None = None
    photo_url: HttpUrlString | None = None
    email: Email | None = None
    phone_number: PhoneNumber | None = None
    level: Level = None
    height_cm: HeightCm | None = None
    weight_kg: WeightKg | None = None
    date_of_birth: DateOfBirth | None = None
    gender: Gender | None = None
    experience_years: ExperienceYears | None = None
    goals: Goals | None = None
    injuries: Injuries | None = None
    notes: Notes | None = None
    language: Language = None
    timezone: Timezone = None
    notifications_enabled: NotificationsEnabled = None
    bank_account_number: BankAccountNumber | None = None
    bank_account_holder: BankAccountHolder | None = None
    bank_name: BankName | None = None
    paypal_email: Email | None = None
    payout_method: Payout | None = None


class TelegramLogin(RequestSchema):
    """Telegram Login Widget payload; only the shape is checked here."""

    id: TelegramId
    first_name: FirstName
    username: TelegramUsername = None
    last_name: LastName = None
    photo_url: HttpUrlString = None
    auth_date: AuthDate
    hash: TelegramHash


class CreateUserRecord(RequestSchema):
    """Payload to log a personal record."""

    exercise_name: ExerciseName
    record_type: RecordType
    value: RecordValue
    unit: Unit = None
    achieved_at: AchievedAt = None


class PaginationQuery(RequestSchema):
    """Query string for list endpoints; numbers arrive as strings."""

    page: PageNumber = 1
    limit: PageLimit = 10
    sort_by: SortField = Field(default=None, alias="sortBy")
    order: SortOrder = "asc"


class GetUserParams(RequestSchema):
    """Path parameters for ``/users/{userId}`` routes."""

    user_id: PathUserId = Field(alias="userId")
