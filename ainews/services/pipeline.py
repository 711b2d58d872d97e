"""
Ingestion pipeline runner

One run covers one source family:

    fetch (parallel) -> normalize -> dedupe -> extract body (parallel,
    inserts only) -> persist

Database writes happen on the coordinating thread, one record per
transaction. A failing source or item is counted and skipped; an
unreachable database aborts the run.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ainews.config import settings
from ainews.errors import PersistenceUnavailable
from ainews.models.content import EVENT_FAMILIES, FAMILIES
from ainews.services.content_extractor import extract_article_content
from ainews.services.deduplicator import Action, Deduplicator
from ainews.services.normalizer import NormalizedEvent, NormalizedItem, normalize, normalize_event
from ainews.services.scrapers.base import FetchOutcome, SourceDescriptor
from ainews.services.scrapers.manager import ScraperManager, scraper_manager
from ainews.services.source_registry import SourceRegistry
from ainews.services.storage import NewsStorage, news_storage
from ainews.utils.text import utcnow

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    family: str
    fetched: int = 0
    saved: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    skipped_busy: bool = False
    started_at: datetime = field(default_factory=utcnow)
    duration: float = 0.0

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["started_at"] = self.started_at.isoformat()
        return data


class IngestionPipeline:
    def __init__(self, storage: NewsStorage = None, fetcher: ScraperManager = None,
                 extractor: Callable[[str], str] = None, registry: SourceRegistry = None):
        self.storage = storage or news_storage
        self.fetcher = fetcher or scraper_manager
        self.extractor = extractor or extract_article_content
        self.registry = registry or SourceRegistry(self.storage)
        self._locks = {family: threading.Lock() for family in FAMILIES}

    def is_running(self, family: str) -> bool:
        return self._locks[family].locked()

    def run_family(self, family: str) -> RunReport:
        """
        Run one family end to end.

        A second trigger while the family is still running is skipped and
        reported with skipped_busy=True.
        """
        if family not in FAMILIES:
            raise ValueError(f"Unknown source family '{family}'")

        lock = self._locks[family]
        if not lock.acquire(blocking=False):
            logger.warning(f"⏭️ [PIPELINE] {family} run already in progress, skipping trigger")
            return RunReport(family=family, skipped_busy=True)

        report = RunReport(family=family)
        started = time.monotonic()
        logger.info(f"🤖 [PIPELINE] Starting {family} run...")

        try:
            self.storage.ping()
            sources = self.registry.sources_for(family)

            if family in EVENT_FAMILIES:
                self._run_events(sources, report)
            else:
                self._run_news(sources, report)

        except PersistenceUnavailable as e:
            logger.error(f"❌ [PIPELINE] {family} run aborted, database unavailable: {e}")
            report.aborted = True
        finally:
            report.duration = round(time.monotonic() - started, 3)
            lock.release()

        logger.info(
            f"✅ [PIPELINE] {family}: fetched {report.fetched}, saved {report.saved}, "
            f"updated {report.updated}, skipped {report.skipped}, failed {report.failed}"
            f"{' (aborted)' if report.aborted else ''}"
        )
        return report

    def _record_outcome(self, outcome: FetchOutcome):
        """Counter write errors are logged; the run keeps its items"""
        try:
            self.storage.record_fetch_outcome(
                outcome.source.id, outcome.ok, len(outcome.items), outcome.error
            )
        except PersistenceUnavailable:
            raise
        except Exception as e:
            logger.error(f"    ❌ Could not update counters for {outcome.source.name}: {e}")

    def _run_news(self, sources: List[SourceDescriptor], report: RunReport):
        dedupe = Deduplicator(self.storage)
        accepted: List[NormalizedItem] = []
        wants_body: List[bool] = []

        for outcome in self.fetcher.fetch_all(sources):
            self._record_outcome(outcome)
            if not outcome.ok:
                continue

            report.fetched += len(outcome.items)
            for raw in outcome.items:
                try:
                    item = normalize(raw, outcome.source)
                    if not item.title or not item.link:
                        report.failed += 1
                        continue
                    action = dedupe.resolve(item)
                except PersistenceUnavailable:
                    raise
                except Exception as e:
                    logger.error(f"    ❌ Could not process '{getattr(raw, 'title', '')[:50]}': {e}")
                    report.failed += 1
                    continue

                if action is Action.SKIP:
                    logger.info(f"    ⏭️  Duplicate skipped: {item.title[:50]}...")
                    report.skipped += 1
                    continue

                accepted.append(item)
                wants_body.append(outcome.source.extract_body)

        self._extract_bodies(accepted, wants_body)

        for item in accepted:
            try:
                self.storage.insert_news(item)
                report.saved += 1
                logger.info(f"    ✅ {item.title[:50]}...")
            except PersistenceUnavailable:
                raise
            except Exception as e:
                logger.error(f"    ❌ Failed to save '{item.title[:50]}': {e}")
                report.failed += 1

    def _extract_bodies(self, items: List[NormalizedItem], wants_body: List[bool]):
        """Replace summaries with full article text where extraction succeeds"""
        if not settings.EXTRACT_FULL_CONTENT:
            return

        targets = [item for item, wanted in zip(items, wants_body) if wanted]
        if not targets:
            return

        workers = max(1, min(settings.EXTRACT_CONCURRENCY, len(targets)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="extract") as executor:
            bodies = executor.map(self._safe_extract, [item.link for item in targets])
            for item, body in zip(targets, bodies):
                if body:
                    item.body = body
                    item.body_extracted = True

    def _safe_extract(self, url: str) -> str:
        try:
            return self.extractor(url)
        except Exception as e:
            logger.warning(f"    ⚠️ Extraction error for {url}: {e}")
            return ""

    def _run_events(self, sources: List[SourceDescriptor], report: RunReport):
        # Same name seen twice in one run: the later item wins
        merged: Dict[str, NormalizedEvent] = {}

        for outcome in self.fetcher.fetch_all(sources):
            self._record_outcome(outcome)
            if not outcome.ok:
                continue

            report.fetched += len(outcome.items)
            for raw in outcome.items:
                try:
                    event = normalize_event(raw, outcome.source)
                except Exception as e:
                    logger.error(f"    ❌ Could not normalize event '{getattr(raw, 'name', '')[:50]}': {e}")
                    report.failed += 1
                    continue

                if not event.name or event.start_date is None:
                    report.failed += 1
                    continue

                if event.name in merged:
                    report.skipped += 1
                merged[event.name] = event

        dedupe = Deduplicator(self.storage)
        for event in merged.values():
            try:
                action = dedupe.resolve_event(event)
                if action is Action.UPDATE:
                    event_id = self.storage.find_event_by_name(event.name)
                    self.storage.update_event(event_id, event)
                    report.updated += 1
                else:
                    self.storage.insert_event(event)
                    report.saved += 1
            except PersistenceUnavailable:
                raise
            except Exception as e:
                logger.error(f"    ❌ Failed to save event '{event.name[:50]}': {e}")
                report.failed += 1

    def run_news(self) -> RunReport:
        return self.run_family("news")

    def run_events(self, family: Optional[str] = None) -> List[RunReport]:
        families = [family] if family else list(EVENT_FAMILIES)
        return [self.run_family(name) for name in families]


ingestion_pipeline = IngestionPipeline()
