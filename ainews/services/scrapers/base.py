"""
Shared shapes for multi-source ingestion

Every fetch adapter turns its source's payload into RawCandidate (news) or
RawEvent (events). Nothing here is persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Union


@dataclass(frozen=True)
class SourceDescriptor:
    """Snapshot of a registry row, immutable for the duration of a run"""
    id: Optional[int]
    name: str
    endpoint: str
    region: str
    fetch_kind: str
    family: str
    category: str = "tech"
    keyword_filter: bool = True
    extract_body: bool = True
    item_selector: Optional[str] = None


@dataclass
class RawCandidate:
    """News item as delivered by a feed or listing page"""
    source_name: str
    title: str
    description: str
    link: str
    published_at: datetime


@dataclass
class RawEvent:
    """Event as delivered by an API or the curated conference list"""
    source_name: str
    name: str
    description: str
    start_date: datetime
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    event_type: Optional[str] = None
    region: Optional[str] = None
    link: Optional[str] = None
    registration_url: Optional[str] = None
    speakers: Optional[str] = None
    agenda: Optional[str] = None
    expected_attendees: Optional[int] = None


@dataclass
class FetchOutcome:
    """Result of one fetch attempt; error is set when the source failed"""
    source: SourceDescriptor
    items: List[Union[RawCandidate, RawEvent]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
