from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Naive UTC, the form Mongo hands back with tz_aware=False"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimeMixin(BaseModel):
    created_at: datetime = Field(default_factory=utc_now, description="Creation time (UTC)")
    updated_at: Optional[datetime] = Field(default=None, description="Last modification time (UTC), unset until the first update")
