"""
Source registry - hands each run an immutable snapshot of active sources
"""

import logging
from typing import List, Optional

from ainews.config.sources import default_sources
from ainews.models.content import EVENT_FAMILIES, FAMILIES, NEWS_FAMILIES
from ainews.services.scrapers.base import SourceDescriptor
from ainews.services.storage import NewsStorage, news_storage

logger = logging.getLogger(__name__)

NEWS_FETCH_KINDS = ("feed", "scrape")
EVENT_FETCH_KINDS = ("static-api", "scrape")


def validate_source_kind(family: str, fetch_kind: str) -> Optional[str]:
    """Returns an error message when family and fetch kind do not belong together"""
    if family not in FAMILIES:
        return f"Unknown family '{family}'"
    if family in NEWS_FAMILIES and fetch_kind not in NEWS_FETCH_KINDS:
        return f"News sources must use one of {', '.join(NEWS_FETCH_KINDS)}"
    if family in EVENT_FAMILIES and fetch_kind not in EVENT_FETCH_KINDS:
        return f"Event sources must use one of {', '.join(EVENT_FETCH_KINDS)}"
    return None


class SourceRegistry:
    def __init__(self, storage: NewsStorage = None):
        self.storage = storage or news_storage

    def seed_defaults(self) -> int:
        """Populate an empty registry with the built-in sources"""
        if self.storage.count_sources() > 0:
            return 0
        added = self.storage.seed_sources(default_sources())
        logger.info(f"✅ Seeded {added} default sources")
        return added

    def sources_for(self, family: str) -> List[SourceDescriptor]:
        if family not in FAMILIES:
            raise ValueError(f"Unknown source family '{family}'")
        return self.storage.list_active_sources(family)


source_registry = SourceRegistry()
