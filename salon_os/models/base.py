"""
Shared column helpers for timestamps

Timestamps are timezone-aware UTC values stored in ``timestamptz`` columns.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime

AwareDateTime = DateTime(timezone=True)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
