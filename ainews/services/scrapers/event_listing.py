"""
Event listing adapter for ticketing and conference sites without an API
(activity platforms, conference home pages)
"""

import logging
import re
from datetime import datetime
from typing import List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from ainews.config import settings
from ainews.errors import SourceUnavailable
from ainews.utils.text import strip_html
from ainews.utils.url_utils import absolutize
from .base import RawEvent, SourceDescriptor

logger = logging.getLogger(__name__)

DEFAULT_ITEM_SELECTOR = ".search-tab-content-item, .event-item, .activity-item, .event-card"
MAX_CARDS = 20

# 2026-07-26, 2026/7/26, 2026.07.26, 2026年7月26日
_DATE = re.compile(r"(\d{4})\s*[-/.年]\s*(\d{1,2})\s*[-/.月]\s*(\d{1,2})")


def parse_date_range(text: str) -> Tuple[Optional[datetime], Optional[datetime]]:
    """First date in the text is the start, a second one the end"""
    dates = []
    for year, month, day in _DATE.findall(text or ""):
        try:
            dates.append(datetime(int(year), int(month), int(day)))
        except ValueError:
            continue

    if not dates:
        return None, None
    end = dates[1] if len(dates) > 1 and dates[1] >= dates[0] else None
    return dates[0], end


def parse_event_listing(html: str, source: SourceDescriptor) -> List[RawEvent]:
    """Turn event cards into RawEvents; cards without a readable date are dropped"""
    soup = BeautifulSoup(html, 'html.parser')
    selector = source.item_selector or DEFAULT_ITEM_SELECTOR

    events = []
    seen_names = set()

    for card in soup.select(selector)[:MAX_CARDS]:
        title_elem = card.select_one(".item-title a, .title a, h2 a, h3 a, .item-title, .title, h2, h3")
        if not title_elem:
            continue

        name = title_elem.get_text(strip=True)
        if not name or name in seen_names:
            continue

        time_elem = card.select_one(".item-time, .time, time, .date")
        time_text = ""
        if time_elem:
            time_text = time_elem.get("datetime") or time_elem.get_text(" ", strip=True)

        start, end = parse_date_range(time_text)
        if start is None:
            logger.debug(f"  {source.name}: no date for '{name[:40]}', skipped")
            continue
        seen_names.add(name)

        link_elem = title_elem if title_elem.name == "a" else card.find("a", href=True)
        link = absolutize(link_elem.get("href"), source.endpoint) if link_elem else ""

        location_elem = card.select_one(".item-location, .location, .address")
        description_elem = card.select_one(".item-desc, .description, p")

        events.append(RawEvent(
            source_name=source.name,
            name=name,
            description=strip_html(description_elem.get_text(" ", strip=True)) if description_elem else "",
            start_date=start,
            end_date=end,
            location=location_elem.get_text(strip=True) if location_elem else None,
            region=source.region,
            link=link or None,
            registration_url=link or None
        ))

    return events


def fetch_event_listing(source: SourceDescriptor) -> List[RawEvent]:
    """
    Scrape an event listing page.

    Raises:
        SourceUnavailable: network or HTTP error
    """
    logger.info(f"📅 Scraping events from {source.name}...")

    try:
        response = requests.get(
            source.endpoint,
            headers={'User-Agent': settings.USER_AGENT},
            timeout=settings.FETCH_TIMEOUT_SECONDS
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailable(source.name, str(e)) from e

    events = parse_event_listing(response.text, source)

    if not events:
        logger.warning(f"  {source.name}: no event cards matched '{source.item_selector or DEFAULT_ITEM_SELECTOR}'")

    return events
