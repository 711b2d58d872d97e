"""
Translation orchestrator

Drives the per-record state machine for international news:

    Pending --success--> Translated
    Pending --failure--> Failed (retries + 1)
    Failed  --requeue, retries < max--> Pending

Transitions out of Pending only apply while the record is still Pending,
so two overlapping sweeps can never count the same failure twice.

Each record is handled on its own; one bad record never stops the sweep.
Only losing the database does.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import List, Optional

from ainews.config import settings
from ainews.errors import PersistenceUnavailable
from ainews.services.storage import NewsStorage, PendingTranslation, news_storage
from ainews.utils.text import is_latin_dominant

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    claimed: int = 0
    translated: int = 0
    failed: int = 0
    superseded: int = 0
    aborted: bool = False
    skipped_busy: bool = False


class TranslationOrchestrator:
    def __init__(self, storage: NewsStorage = None, translator=None):
        self.storage = storage or news_storage
        self._translator = translator
        self._lock = threading.Lock()

    @property
    def translator(self):
        if self._translator is None:
            from ainews.services.translation_service import translation_service
            self._translator = translation_service
        return self._translator

    def _translate_fields(self, record: PendingTranslation):
        """Returns (title_zh, summary_zh, content_zh)"""
        fields = [record.title or "", record.summary or ""]
        results = list(fields)

        to_translate = [i for i, value in enumerate(fields) if is_latin_dominant(value)]
        if to_translate:
            translated = self.translator.translate_batch(
                [fields[i] for i in to_translate],
                settings.TRANSLATION_TARGET_LANGUAGE
            )
            for i, value in zip(to_translate, translated):
                results[i] = value

        title_zh, summary_zh = results

        body = record.content or ""
        if (settings.TRANSLATE_FULL_BODY and record.content_extracted
                and body and body != record.summary):
            if is_latin_dominant(body):
                content_zh = self.translator.translate_body(body, settings.TRANSLATION_TARGET_LANGUAGE)
            else:
                content_zh = body
        else:
            content_zh = summary_zh

        return title_zh, summary_zh, content_zh

    def translate_record(self, record: PendingTranslation) -> Optional[bool]:
        """
        True when translated, False when marked Failed, None when another
        sweep settled the record first.
        """
        try:
            title_zh, summary_zh, content_zh = self._translate_fields(record)
            if not title_zh or not summary_zh:
                raise ValueError("translation produced empty title or summary")
        except Exception as e:
            retries = self.storage.mark_translation_failed(record.id, settings.TRANSLATION_MAX_RETRIES)
            if retries is None:
                logger.info(f"[TRANSLATION] Article {record.id} already settled elsewhere, result dropped")
                return None
            logger.error(f"[TRANSLATION] Article {record.id} failed (attempt {retries}): {e}")
            return False

        if not self.storage.mark_translated(record.id, title_zh, summary_zh, content_zh):
            logger.info(f"[TRANSLATION] Article {record.id} already settled elsewhere, result dropped")
            return None
        logger.info(f"[TRANSLATION] Translated article {record.id}: {record.title[:50]}...")
        return True

    def is_running(self) -> bool:
        return self._lock.locked()

    def run_translation_sweep(self, limit: int = None) -> SweepReport:
        """
        Claim and translate one batch. A trigger that arrives while a sweep
        is still running is skipped and reported with skipped_busy=True.
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("⏭️ [TRANSLATION] Sweep already in progress, skipping trigger")
            return SweepReport(skipped_busy=True)

        try:
            return self._sweep(limit)
        finally:
            self._lock.release()

    def _sweep(self, limit: int = None) -> SweepReport:
        report = SweepReport()

        try:
            records: List[PendingTranslation] = self.storage.claim_pending(
                limit or settings.TRANSLATION_BATCH_SIZE
            )
            report.claimed = len(records)

            if not records:
                logger.info("[TRANSLATION] No articles need translation")
                return report

            for index, record in enumerate(records):
                try:
                    ok = self.translate_record(record)
                except PersistenceUnavailable:
                    raise
                except Exception as e:
                    logger.error(f"[TRANSLATION] Could not store result for article {record.id}: {e}")
                    ok = False

                if ok is None:
                    report.superseded += 1
                elif ok:
                    report.translated += 1
                else:
                    report.failed += 1

                if settings.TRANSLATION_DELAY_SECONDS and index < len(records) - 1:
                    time.sleep(settings.TRANSLATION_DELAY_SECONDS)

        except PersistenceUnavailable as e:
            logger.error(f"❌ [TRANSLATION] Database unavailable, sweep aborted: {e}")
            report.aborted = True
            return report

        logger.info(
            f"✅ [TRANSLATION] Sweep done: {report.translated} translated, "
            f"{report.failed} failed of {report.claimed}"
        )
        return report

    def requeue_failed(self) -> int:
        count = self.storage.requeue_failed(settings.TRANSLATION_MAX_RETRIES)
        if count:
            logger.info(f"🔁 [TRANSLATION] Requeued {count} failed articles")
        return count


translation_orchestrator = TranslationOrchestrator()
