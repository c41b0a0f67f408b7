from datetime import datetime
from typing import Optional


def format_status(status: str) -> str:
    """`in_progress` -> "In Progress"."""
    return " ".join(word[:1].upper() + word[1:] for word in status.split("_"))


def parse_timestamp(value: str) -> datetime:
    """ISO timestamps as the API sends them (`...Z` included)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def format_date(value: Optional[str]) -> str:
    """`2025-01-05T14:30:00Z` -> "Jan 5, 2025, 02:30 PM"."""
    if not value:
        return ""
    moment = parse_timestamp(value)
    return f"{moment:%b} {moment.day}, {moment.year}, {moment:%I:%M %p}"
