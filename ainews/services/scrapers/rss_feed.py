"""
RSS/Atom feed adapter
"""

import logging
from typing import List

import feedparser
import requests

from ainews.config import settings
from ainews.errors import SourceUnavailable
from ainews.utils.text import parse_datetime, utcnow
from ainews.utils.url_utils import absolutize
from .base import RawCandidate, SourceDescriptor

logger = logging.getLogger(__name__)


def _entry_description(entry) -> str:
    if entry.get("summary"):
        return entry.get("summary")
    content = entry.get("content")
    if content:
        return content[0].get("value", "")
    return entry.get("description", "")


def fetch_feed(source: SourceDescriptor) -> List[RawCandidate]:
    """
    Download and parse a feed.

    The download goes through requests so the per-call timeout applies;
    feedparser only parses the bytes.

    Raises:
        SourceUnavailable: network error, HTTP error, or an unparseable feed
    """
    logger.info(f"📡 Fetching RSS from {source.name}...")

    try:
        response = requests.get(
            source.endpoint,
            headers={'User-Agent': settings.USER_AGENT},
            timeout=settings.FETCH_TIMEOUT_SECONDS
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailable(source.name, str(e)) from e

    feed = feedparser.parse(response.content)

    if feed.bozo and not feed.entries:
        raise SourceUnavailable(source.name, f"unparseable feed: {feed.get('bozo_exception')}")

    fetched_at = utcnow()
    candidates = []

    for entry in feed.entries:
        title = (entry.get("title") or "").strip()
        link = absolutize((entry.get("link") or "").strip(), source.endpoint)

        if not title or not link:
            continue

        published = (
            parse_datetime(entry.get("published_parsed"))
            or parse_datetime(entry.get("updated_parsed"))
            or parse_datetime(entry.get("published"))
            or fetched_at
        )

        candidates.append(RawCandidate(
            source_name=source.name,
            title=title,
            description=_entry_description(entry),
            link=link,
            published_at=published
        ))

    logger.info(f"  📋 {source.name}: {len(candidates)} entries in feed")
    return candidates
