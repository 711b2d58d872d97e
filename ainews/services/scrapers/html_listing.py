"""
Listing-page adapter for sources without a usable feed (company news pages)
"""

import logging
from typing import List

import requests
from bs4 import BeautifulSoup

from ainews.config import settings
from ainews.errors import SourceUnavailable
from ainews.utils.text import parse_datetime, strip_html, utcnow
from ainews.utils.url_utils import absolutize
from .base import RawCandidate, SourceDescriptor

logger = logging.getLogger(__name__)

DEFAULT_ITEM_SELECTOR = "article, .blog-post, .post-item, .news-item, .post"
MAX_CARDS = 50


def parse_listing(html: str, source: SourceDescriptor) -> List[RawCandidate]:
    """Turn listing cards into candidates, in page order"""
    soup = BeautifulSoup(html, 'html.parser')
    selector = source.item_selector or DEFAULT_ITEM_SELECTOR
    fetched_at = utcnow()

    candidates = []
    seen_links = set()

    for card in soup.select(selector)[:MAX_CARDS]:
        title_elem = card.select_one("h1, h2, h3, .title")
        link_elem = card.find("a", href=True)

        if not title_elem or not link_elem:
            continue

        title = title_elem.get_text(strip=True)
        link = absolutize(link_elem.get("href"), source.endpoint)

        if not title or not link or link in seen_links:
            continue
        seen_links.add(link)

        summary_elem = card.select_one("p, .summary, .excerpt")
        summary = strip_html(summary_elem.get_text(" ", strip=True)) if summary_elem else ""

        date_elem = card.select_one("time, .date")
        published = None
        if date_elem:
            published = parse_datetime(date_elem.get("datetime") or date_elem.get_text(strip=True))

        candidates.append(RawCandidate(
            source_name=source.name,
            title=title,
            description=summary,
            link=link,
            published_at=published or fetched_at
        ))

    return candidates


def fetch_listing(source: SourceDescriptor) -> List[RawCandidate]:
    """
    Scrape a listing page.

    Raises:
        SourceUnavailable: network or HTTP error
    """
    logger.info(f"🔍 Scraping {source.name}...")

    try:
        response = requests.get(
            source.endpoint,
            headers={'User-Agent': settings.USER_AGENT},
            timeout=settings.FETCH_TIMEOUT_SECONDS
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailable(source.name, str(e)) from e

    candidates = parse_listing(response.text, source)

    if not candidates:
        logger.warning(f"  {source.name}: no article cards matched '{source.item_selector or DEFAULT_ITEM_SELECTOR}'")

    return candidates
