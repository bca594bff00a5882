"""
Usage quota schemas module.
"""
from datetime import datetime, timezone
from pydantic import BaseModel, field_serializer


def utc_isoformat(value: datetime) -> str:
    """Render a UTC datetime with an explicit ``Z`` offset; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class UsageCheck(BaseModel):
    """Outcome of a quota check."""
    allowed: bool
    remaining: int
    reset_at: datetime

    @field_serializer("reset_at", when_used="json")
    def serialize_reset_at(self, value: datetime) -> str:
        return utc_isoformat(value)


class UsageSummary(BaseModel):
    """Current consumption against the free reader limits."""
    daily_used: int
    daily_limit: int
    monthly_used: int
    monthly_limit: int
    daily_reset_at: datetime
    monthly_reset_at: datetime

    @field_serializer("daily_reset_at", "monthly_reset_at", when_used="json")
    def serialize_reset_at(self, value: datetime) -> str:
        return utc_isoformat(value)
