"""
Parsing for the source's DD-MM-YYYY HH:MM timestamps.

Timestamps carry no seconds and no zone; they are treated as naive local time.
"""
import logging
from datetime import datetime
from typing import Optional

from .errors import TimestampError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%d-%m-%Y %H:%M"


def _parse_strict(text: str) -> datetime:
    if not isinstance(text, str):
        raise TimestampError(f"Timestamp must be text, got {type(text).__name__}")

    tokens = text.strip().split(" ")
    if len(tokens) != 2:
        raise TimestampError(f"Expected 'DD-MM-YYYY HH:MM', got {text!r}")

    date_part, time_part = tokens
    date_tokens = date_part.split("-")
    time_tokens = time_part.split(":")
    if len(date_tokens) != 3 or len(time_tokens) != 2:
        raise TimestampError(f"Expected 'DD-MM-YYYY HH:MM', got {text!r}")

    parts = date_tokens + time_tokens
    if not all(p.isascii() and p.isdigit() for p in parts):
        raise TimestampError(f"Non-numeric timestamp component in {text!r}")

    day, month, year, hour, minute = (int(p) for p in parts)
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError as e:
        raise TimestampError(f"Out of range timestamp {text!r}: {e}")


def try_parse_timestamp(text: str) -> Optional[datetime]:
    """Return the parsed instant, or None when the text is malformed."""
    try:
        return _parse_strict(text)
    except TimestampError:
        return None


def parse_timestamp(text: str, *, fallback: bool = True) -> datetime:
    """
    Parse 'DD-MM-YYYY HH:MM' into a naive datetime.

    With fallback=True a malformed value yields the current wall-clock time
    and a warning instead of an error. That substitution silently reorders the
    bar, so callers that care about ordering should use fallback=False or
    try_parse_timestamp().
    """
    try:
        return _parse_strict(text)
    except TimestampError as e:
        if not fallback:
            raise
        logger.warning(f"Error parsing date {text!r}, using current time: {e.message}")
        return datetime.now()


def format_timestamp(instant: datetime) -> str:
    return instant.strftime(TIMESTAMP_FORMAT)
