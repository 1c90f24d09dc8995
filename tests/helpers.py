from datetime import datetime

from services.user_management.models.users import User
from shared.auth import create_access_token

PASSWORD = "Secret123"


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.username, "role": user.role.value, "user_id": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


def at(hour: int, minute: int = 0, day: int = 2) -> datetime:
    """A naive UTC timestamp on a fixed test day."""
    return datetime(2026, 3, day, hour, minute)
