"""Model module imports for SQLAlchemy relationship registration."""

from wod_tracker.db.models.record import UserRecord
from wod_tracker.db.models.user import User

__all__ = [
    "User",
    "UserRecord",
]
