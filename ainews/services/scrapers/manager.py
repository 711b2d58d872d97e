"""
Scraper Manager - fans a family's sources out over a bounded thread pool
One source failing never affects the others
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterator, List

from ainews.config import settings
from ainews.errors import SourceUnavailable
from ainews.models.content import EVENT_FAMILIES
from ainews.services.classification import is_ai_related
from .base import FetchOutcome, SourceDescriptor
from .event_api import fetch_events
from .event_listing import fetch_event_listing
from .html_listing import fetch_listing
from .rss_feed import fetch_feed

logger = logging.getLogger(__name__)

# Closed set of fetch strategies. Keyed by fetch_kind, except that scraped
# event pages have their own parser under 'event-scrape'.
ADAPTERS: Dict[str, Callable[[SourceDescriptor], List]] = {
    'feed': fetch_feed,
    'scrape': fetch_listing,
    'static-api': fetch_events,
    'event-scrape': fetch_event_listing,
}


def adapter_key(source: SourceDescriptor) -> str:
    if source.fetch_kind == 'scrape' and source.family in EVENT_FAMILIES:
        return 'event-scrape'
    return source.fetch_kind


def _is_relevant(item) -> bool:
    title = getattr(item, 'title', None) or getattr(item, 'name', '')
    return is_ai_related(title, item.description)


class ScraperManager:
    """Runs fetch adapters for many sources concurrently"""

    def __init__(self, adapters: Dict[str, Callable] = None, max_workers: int = None,
                 items_per_source: int = None):
        self.adapters = adapters or ADAPTERS
        self.max_workers = max_workers or settings.FETCH_CONCURRENCY
        self.items_per_source = items_per_source or settings.ITEMS_PER_SOURCE

    def fetch_source(self, source: SourceDescriptor) -> FetchOutcome:
        """
        Fetch one source, never raising.

        News items pass the AI keyword gate (when the source asks for it)
        before the per-source cap is applied, so the cap counts relevant
        items in feed order.
        """
        adapter = self.adapters.get(adapter_key(source))
        if adapter is None:
            logger.error(f"  ❌ {source.name}: unknown fetch kind '{source.fetch_kind}'")
            return FetchOutcome(source=source, error=f"unknown fetch kind {source.fetch_kind}")

        try:
            items = adapter(source)
        except SourceUnavailable as e:
            logger.warning(f"  ❌ {source.name} unavailable: {e.reason}")
            return FetchOutcome(source=source, error=e.reason)
        except Exception as e:
            logger.error(f"  ❌ {source.name} failed: {e}")
            return FetchOutcome(source=source, error=str(e))

        if source.fetch_kind != 'static-api':
            if source.keyword_filter:
                items = [item for item in items if _is_relevant(item)]
            items = items[:self.items_per_source]

        logger.info(f"  ✅ {source.name}: {len(items)} items")
        return FetchOutcome(source=source, items=items)

    def fetch_all(self, sources: List[SourceDescriptor]) -> Iterator[FetchOutcome]:
        """
        Fetch every source in parallel.

        Yields outcomes in completion order; a slow source only delays its
        own results.
        """
        if not sources:
            return

        workers = max(1, min(self.max_workers, len(sources)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fetch") as executor:
            futures = {executor.submit(self.fetch_source, source): source for source in sources}
            for future in as_completed(futures):
                yield future.result()


scraper_manager = ScraperManager()
