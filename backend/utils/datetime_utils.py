from datetime import datetime, date, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_naive() -> datetime:
    """Current UTC time without tzinfo, the form stored in the database."""
    return utcnow().replace(tzinfo=None)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso(value: str | datetime | date) -> datetime:
    """Parse an ISO-8601 value into a naive UTC datetime.

    Naive inputs are taken to already be UTC. A trailing ``Z`` is accepted.
    Raises ValueError for anything that is not a date or datetime.
    """
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raw = str(value or "").strip()
    if not raw:
        raise ValueError("empty datetime value")
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    return to_naive_utc(datetime.fromisoformat(raw))


def to_iso(value: datetime | None) -> str | None:
    """Canonical text form: ISO-8601 UTC, millisecond precision, ``Z`` suffix."""
    if value is None:
        return None
    value = to_naive_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def days_before(end: datetime, days: int) -> datetime:
    return end - timedelta(days=int(days))
