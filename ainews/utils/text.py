import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")
_LATIN_LETTER = re.compile(r"[A-Za-z]")


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how TIMESTAMP columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def strip_html(value: str) -> str:
    """Drop markup and collapse whitespace"""
    if not value:
        return ""
    if "<" in value and ">" in value:
        value = BeautifulSoup(value, "html.parser").get_text(separator=" ")
    return _WHITESPACE.sub(" ", value).strip()


def truncate(value: str, limit: int) -> str:
    if not value or len(value) <= limit:
        return value or ""
    return value[:limit].rstrip()


def latin_ratio(text: str) -> float:
    """Share of non-whitespace characters that are ASCII letters"""
    if not text:
        return 0.0
    total = len(_WHITESPACE.sub("", text))
    if total == 0:
        return 0.0
    return len(_LATIN_LETTER.findall(text)) / total


def is_latin_dominant(text: str) -> bool:
    """More than half latin letters means the text still needs translating"""
    return latin_ratio(text) > 0.5


def parse_datetime(value) -> Optional[datetime]:
    """
    Best-effort date parsing for feed and API payloads.

    Accepts datetimes, struct_time tuples (feedparser), RFC 822 strings (RSS)
    and ISO 8601 strings. Returns a naive UTC datetime or None.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, tuple) or hasattr(value, "tm_year"):
        try:
            dt = datetime(*tuple(value)[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            return None
    elif isinstance(value, (int, float)):
        # epoch milliseconds are common in JS-backed APIs
        seconds = value / 1000 if value > 10_000_000_000 else value
        try:
            dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(value).strip()
        dt = None
        try:
            dt = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            dt = None
        if dt is None:
            try:
                dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
