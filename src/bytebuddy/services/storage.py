"""Key-value storage interface shared by the account-scoped stores."""

from datetime import UTC, datetime
from typing import Protocol

USERS_KEY = "bytebuddy_users"
SESSION_KEY = "bytebuddy_user"


class KeyValueStore(Protocol):
    """String key-value storage with whole-value reads and writes."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""


def profile_key(account_id: str) -> str:
    return f"bytebuddy_profile_{account_id}"


def conversations_key(account_id: str) -> str:
    return f"bytebuddy_conversations_{account_id}"


def messages_key(account_id: str) -> str:
    return f"bytebuddy_messages_{account_id}"


def water_key(account_id: str) -> str:
    return f"bytebuddy_water_{account_id}"


def meals_key(account_id: str) -> str:
    return f"bytebuddy_meals_{account_id}"


def format_timestamp(value: datetime) -> str:
    """Format a datetime as a UTC ISO string with a Z suffix."""
    utc_value = value.astimezone(UTC)
    return utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: object) -> datetime:
    """Parse an ISO timestamp, treating naive values as UTC."""
    if not isinstance(raw, str):
        raise TypeError(f"Expected an ISO timestamp string, got {type(raw).__name__}")
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
