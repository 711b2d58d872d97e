"""
Item normalization

Pure mapping from adapter output to the canonical shapes the deduplicator
and storage work with. No I/O happens here.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ainews.config import settings
from ainews.models.content import CATEGORIES, EVENT_TYPES, REGIONS
from ainews.utils.text import strip_html, truncate
from ainews.utils.url_utils import url_hash
from ainews.services.classification import identify_event_type
from ainews.services.scrapers.base import RawCandidate, RawEvent, SourceDescriptor


@dataclass
class NormalizedItem:
    title: str
    summary: str
    body: str
    link: str
    published_at: datetime
    source: str
    region: str
    category: str
    content_fingerprint: str
    body_extracted: bool = False


@dataclass
class NormalizedEvent:
    name: str
    description: str
    start_date: datetime
    end_date: Optional[datetime]
    location: Optional[str]
    type: str
    region: str
    url: Optional[str]
    registration_url: Optional[str]
    speakers: Optional[str]
    agenda: Optional[str]
    expected_attendees: Optional[int]
    source: str
    category: str = "event"


def normalize(raw: RawCandidate, source: SourceDescriptor) -> NormalizedItem:
    title = strip_html(raw.title)
    description = strip_html(raw.description)
    summary = truncate(description or title, settings.SUMMARY_MAX_CHARS)
    link = raw.link.strip()

    category = source.category if source.category in CATEGORIES else "tech"
    region = source.region if source.region in REGIONS else "international"

    return NormalizedItem(
        title=title,
        summary=summary,
        body=summary,
        link=link,
        published_at=raw.published_at,
        source=raw.source_name or source.name,
        region=region,
        category=category,
        content_fingerprint=url_hash(link)
    )


def normalize_event(raw: RawEvent, source: SourceDescriptor) -> NormalizedEvent:
    name = strip_html(raw.name)
    description = strip_html(raw.description)

    event_type = raw.event_type if raw.event_type in EVENT_TYPES else None
    if event_type is None:
        event_type = identify_event_type(f"{name} {description} {raw.location or ''}")

    region = raw.region if raw.region in REGIONS else source.region

    return NormalizedEvent(
        name=name,
        description=description,
        start_date=raw.start_date,
        end_date=raw.end_date,
        location=raw.location,
        type=event_type,
        region=region,
        url=raw.link or raw.registration_url,
        registration_url=raw.registration_url,
        speakers=raw.speakers,
        agenda=raw.agenda,
        expected_attendees=raw.expected_attendees,
        source=raw.source_name or source.name
    )
