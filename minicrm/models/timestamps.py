"""
Timezone-aware UTC timestamp columns shared by the models.
"""
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_field(nullable: bool = False):
    """Column stored as TIMESTAMP WITH TIME ZONE; filled with utc_now unless nullable."""
    if nullable:
        return Field(default=None, sa_type=DateTime(timezone=True))
    return Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
