"""
Curated conference list adapter
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ainews.config.known_events import KNOWN_EVENTS
from ainews.utils.text import parse_datetime, utcnow
from .base import RawEvent, SourceDescriptor

logger = logging.getLogger(__name__)

WINDOW = timedelta(days=365)


def fetch_known_events(source: SourceDescriptor, now: Optional[datetime] = None) -> List[RawEvent]:
    """Known conferences starting within a year before or after now"""
    now = now or utcnow()
    events = []

    for entry in KNOWN_EVENTS:
        start = parse_datetime(entry.get("start_date"))
        if start is None:
            logger.warning(f"Skipping known event without a start date: {entry.get('name')}")
            continue

        if not (now - WINDOW <= start <= now + WINDOW):
            continue

        events.append(RawEvent(
            source_name=source.name,
            name=entry["name"],
            description=entry.get("description", ""),
            start_date=start,
            end_date=parse_datetime(entry.get("end_date")),
            location=entry.get("location"),
            event_type=entry.get("type"),
            region=entry.get("region"),
            link=entry.get("url"),
            registration_url=entry.get("registration_url"),
            speakers=entry.get("speakers"),
            agenda=entry.get("agenda"),
            expected_attendees=entry.get("expected_attendees")
        ))

    logger.info(f"📅 {source.name}: {len(events)} known events in window")
    return events
