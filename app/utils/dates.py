from datetime import datetime, date, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[Union[datetime, date, str]]) -> Optional[datetime]:
    """
    Normalize a stored date value to an aware UTC datetime.

    MongoDB hands back naive datetimes unless the client is tz_aware, and
    older documents may hold ISO strings, so both are accepted here.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
