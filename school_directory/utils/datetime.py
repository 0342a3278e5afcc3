from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    # Columns are naive DATETIME holding UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def minutes_from_now(minutes: int) -> datetime:
    return utcnow() + timedelta(minutes=minutes)
