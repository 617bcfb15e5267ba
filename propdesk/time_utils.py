"""Centralised timestamp handling.

All timestamp parsing and calendar-day bucketing goes through this module.
Internal representation: UTC-aware ``datetime``. A trading day is a UTC
calendar date; local time zones are never consulted.
"""

from datetime import date, datetime, timezone


def parse_timestamp(ts: str | int | float | datetime) -> datetime:
    """Parse any timestamp representation to a UTC-aware datetime.

    Accepted inputs:
      * ``datetime`` (naive values are taken to be UTC)
      * ISO 8601 string (``T`` or space separator, with or without ``Z``)
      * ``YYYY/MM/DD`` date prefix (normalised to dashes)
      * Integer or float milliseconds since epoch
    """
    if isinstance(ts, datetime):
        return ts.astimezone(timezone.utc) if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)

    if isinstance(ts, (int, float)):
        return datetime.fromtimestamp(ts / 1000, tz=timezone.utc)

    s = (ts or "").strip()
    if not s:
        raise ValueError("Empty timestamp")

    # Normalise YYYY/MM/DD → YYYY-MM-DD
    if len(s) >= 10 and s[4] == "/" and s[7] == "/":
        s = f"{s[:4]}-{s[5:7]}-{s[8:]}"

    s = s.replace("Z", "+00:00")
    s = s.replace(" ", "T", 1)

    dt = datetime.fromisoformat(s)
    return dt.astimezone(timezone.utc) if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def utc_day(ts: str | int | float | datetime) -> date:
    """Return the UTC calendar date a timestamp falls on."""
    return parse_timestamp(ts).date()


def now_utc() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)
