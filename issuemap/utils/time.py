"""
time.py - time utilities
Single responsibility: common time helpers.
"""
from datetime import datetime


def now() -> datetime:
    return datetime.now().replace(microsecond=0)


def now_iso() -> str:
    return now().isoformat(timespec="seconds")


def to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="seconds")


def parse_iso(value: str | None) -> datetime | None:
    """ISO 8601 text to datetime; empty or missing values give None."""
    if not value:
        return None
    return datetime.fromisoformat(value)
