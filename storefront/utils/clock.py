# storefront/utils/clock.py

from datetime import datetime, timezone

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive values even for aware inserts; read those as UTC."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)
