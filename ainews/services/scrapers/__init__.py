"""
Multi-source fetch adapters
Feeds, scraped listing pages and structured event APIs
"""

from .base import SourceDescriptor, RawCandidate, RawEvent, FetchOutcome
from .manager import ScraperManager, scraper_manager, ADAPTERS

__all__ = [
    'SourceDescriptor',
    'RawCandidate',
    'RawEvent',
    'FetchOutcome',
    'ScraperManager',
    'scraper_manager',
    'ADAPTERS',
]
