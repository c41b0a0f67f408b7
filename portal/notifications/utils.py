from datetime import datetime, timezone
from typing import Optional

from portal.complaints.utils import parse_timestamp


def _ago(amount: int, unit: str) -> str:
    return f"{amount} {unit if amount == 1 else unit + 's'} ago"


def format_relative_time(value: str, now: Optional[datetime] = None) -> str:
    """
    "just now", "5 minutes ago", "1 hour ago", "3 days ago"; anything a
    week or older falls back to a date like "Jan 5, 2025".
    """
    moment = parse_timestamp(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    seconds = int((now - moment).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    if seconds < 60:
        return "just now"
    if minutes < 60:
        return _ago(minutes, "minute")
    if hours < 24:
        return _ago(hours, "hour")
    if days < 7:
        return _ago(days, "day")
    return f"{moment:%b} {moment.day}, {moment.year}"
