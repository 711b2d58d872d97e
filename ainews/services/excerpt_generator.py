"""
Excerpt generator

Feeds often carry a one-line summary. For records whose body was extracted
but whose summary is thin, Claude writes a 400-500 word digest; international
digests also get a Chinese version. An excerpt is written once and never
regenerated.
"""

import logging
import time
from dataclasses import dataclass

from ainews.config import settings
from ainews.errors import PersistenceUnavailable
from ainews.services.storage import ExcerptCandidate, NewsStorage, news_storage
from ainews.utils.text import is_latin_dominant, truncate

logger = logging.getLogger(__name__)


@dataclass
class ExcerptReport:
    candidates: int = 0
    generated: int = 0
    fallback: int = 0
    aborted: bool = False


class ExcerptGenerator:
    def __init__(self, storage: NewsStorage = None, service=None):
        self.storage = storage or news_storage
        self._service = service

    @property
    def service(self):
        if self._service is None:
            from ainews.services.translation_service import translation_service
            self._service = translation_service
        return self._service

    def _excerpt(self, record: ExcerptCandidate):
        """Returns (excerpt, generated_by_llm)"""
        try:
            excerpt = self.service.generate_excerpt(record.title, record.content)
            return truncate(excerpt, settings.EXCERPT_MAX_CHARS), True
        except Exception as e:
            logger.warning(f"[EXCERPT] Article {record.id}: generation failed, using body start: {e}")
            return truncate(record.content, settings.EXCERPT_FALLBACK_CHARS), False

    def _translated(self, record: ExcerptCandidate, excerpt: str):
        if record.region != "international":
            return None
        if not is_latin_dominant(excerpt):
            return excerpt
        try:
            return self.service.translate_body(excerpt, settings.TRANSLATION_TARGET_LANGUAGE)
        except Exception as e:
            logger.warning(f"[EXCERPT] Article {record.id}: excerpt translation failed: {e}")
            return None

    def run_excerpt_sweep(self, limit: int = None) -> ExcerptReport:
        report = ExcerptReport()

        try:
            records = self.storage.find_excerpt_candidates(
                limit or settings.EXCERPT_BATCH_SIZE,
                settings.EXCERPT_THIN_SUMMARY_CHARS
            )
            report.candidates = len(records)

            if not records:
                logger.info("[EXCERPT] No articles need an excerpt")
                return report

            for index, record in enumerate(records):
                excerpt, generated = self._excerpt(record)
                if not excerpt:
                    continue

                try:
                    stored = self.storage.store_excerpt(record.id, excerpt, self._translated(record, excerpt))
                except PersistenceUnavailable:
                    raise
                except Exception as e:
                    logger.error(f"[EXCERPT] Could not store excerpt for article {record.id}: {e}")
                    continue

                if stored and generated:
                    report.generated += 1
                elif stored:
                    report.fallback += 1

                if settings.TRANSLATION_DELAY_SECONDS and index < len(records) - 1:
                    time.sleep(settings.TRANSLATION_DELAY_SECONDS)

        except PersistenceUnavailable as e:
            logger.error(f"❌ [EXCERPT] Database unavailable, sweep aborted: {e}")
            report.aborted = True
            return report

        logger.info(
            f"✅ [EXCERPT] Sweep done: {report.generated} generated, "
            f"{report.fallback} from body start, of {report.candidates}"
        )
        return report


excerpt_generator = ExcerptGenerator()
