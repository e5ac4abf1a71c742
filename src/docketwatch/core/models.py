from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator


def ensure_utc(value: Any) -> Any:
    """Coerce ISO strings, epoch milliseconds and naive datetimes into aware UTC datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        # Handle both naive ISO strings and RFC 3339 with timezone
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DocketWatchModel(BaseModel):
    """Base class for all docketwatch models."""

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("created_at", mode="before")
    @classmethod
    def ensure_timezone_aware(cls, value: Any) -> datetime:
        """Ensure datetime is timezone-aware (handles epoch millis from the store)."""
        return ensure_utc(value)
