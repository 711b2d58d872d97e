"""
Persistence gateway

All pipeline reads and writes go through NewsStorage. Each call runs in its
own short transaction. Losing the database surfaces as
PersistenceUnavailable; any other SQLAlchemy error is left to the caller,
which treats it as a per-item failure.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import case, func, text
from sqlalchemy.exc import InterfaceError, OperationalError

import ainews.models as models
from ainews.config import settings
from ainews.errors import PersistenceUnavailable
from ainews.models.content import IndustryEvent, NewsArticle, Source, TranslationStatus
from ainews.services.normalizer import NormalizedEvent, NormalizedItem
from ainews.services.scrapers.base import SourceDescriptor
from ainews.utils.text import utcnow

logger = logging.getLogger(__name__)

# Columns the correction path may touch; translation fields are never among them
CORRECTABLE_NEWS_FIELDS = (
    "title", "summary", "content", "content_extracted",
    "source", "category", "published_at",
)


@dataclass
class PendingTranslation:
    """Detached view of a claimed record, safe to use after the session closes"""
    id: int
    title: str
    summary: str
    content: str
    content_extracted: bool


@dataclass
class ExcerptCandidate:
    id: int
    title: str
    content: str
    region: str


class NewsStorage:
    def __init__(self, session_factory: Optional[Callable] = None):
        self._session_factory = session_factory

    @contextmanager
    def _session(self):
        factory = self._session_factory or models.get_session
        try:
            db = factory()
        except (OperationalError, InterfaceError) as e:
            raise PersistenceUnavailable(str(e)) from e

        try:
            yield db
            db.commit()
        except (OperationalError, InterfaceError) as e:
            db.rollback()
            raise PersistenceUnavailable(str(e)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self):
        """Raise PersistenceUnavailable unless the database answers"""
        with self._session() as db:
            db.execute(text("SELECT 1"))

    # News

    def find_news_by_link(self, link: str) -> Optional[int]:
        with self._session() as db:
            row = db.query(NewsArticle.id).filter(NewsArticle.source_url == link).first()
            return row[0] if row else None

    def find_news_by_fingerprint(self, fingerprint: str) -> Optional[int]:
        with self._session() as db:
            row = db.query(NewsArticle.id).filter(NewsArticle.content_hash == fingerprint).first()
            return row[0] if row else None

    def insert_news(self, item: NormalizedItem) -> int:
        """Insert a new record; international news starts Pending translation"""
        if item.region == "international":
            status = TranslationStatus.PENDING
        else:
            status = TranslationStatus.NOT_NEEDED

        with self._session() as db:
            article = NewsArticle(
                title=item.title,
                summary=item.summary,
                content=item.body,
                source_url=item.link,
                content_hash=item.content_fingerprint,
                source=item.source,
                category=item.category,
                region=item.region,
                published_at=item.published_at,
                content_extracted=item.body_extracted,
                translation_status=status.value,
                translation_retries=0,
            )
            db.add(article)
            db.flush()
            return article.id

    def update_news_content(self, news_id: int, **fields) -> bool:
        """
        Correction path for non-translation fields.

        Returns False when the record does not exist.

        Raises:
            ValueError: a field outside CORRECTABLE_NEWS_FIELDS was passed
        """
        unknown = set(fields) - set(CORRECTABLE_NEWS_FIELDS)
        if unknown:
            raise ValueError(f"Fields not updatable here: {', '.join(sorted(unknown))}")

        with self._session() as db:
            article = db.query(NewsArticle).filter(NewsArticle.id == news_id).first()
            if not article:
                return False
            for name, value in fields.items():
                setattr(article, name, value)
            article.updated_at = utcnow()
            return True

    def find_news_for_refetch(self, ids: Optional[List[int]], limit: int) -> List[tuple]:
        """(id, source_url) pairs; without ids, newest records lacking an extracted body"""
        with self._session() as db:
            query = db.query(NewsArticle.id, NewsArticle.source_url)
            if ids:
                query = query.filter(NewsArticle.id.in_(ids))
            else:
                query = query.filter(NewsArticle.content_extracted.is_(False))
            rows = query.order_by(NewsArticle.published_at.desc(), NewsArticle.id.desc()).limit(limit).all()
            return [(row[0], row[1]) for row in rows]

    # Events

    def find_event_by_name(self, name: str) -> Optional[int]:
        with self._session() as db:
            row = db.query(IndustryEvent.id).filter(IndustryEvent.name == name).first()
            return row[0] if row else None

    @staticmethod
    def _apply_event(record: IndustryEvent, event: NormalizedEvent):
        record.description = event.description
        record.url = event.url
        record.source = event.source
        record.category = event.category
        record.region = event.region
        record.start_date = event.start_date
        record.end_date = event.end_date
        record.location = event.location
        record.type = event.type
        record.registration_url = event.registration_url
        record.speakers = event.speakers
        record.agenda = event.agenda
        record.expected_attendees = event.expected_attendees

    def insert_event(self, event: NormalizedEvent) -> int:
        with self._session() as db:
            record = IndustryEvent(name=event.name)
            self._apply_event(record, event)
            db.add(record)
            db.flush()
            return record.id

    def update_event(self, event_id: int, event: NormalizedEvent) -> bool:
        """Overwrite every mutable field of an existing event in place"""
        with self._session() as db:
            record = db.query(IndustryEvent).filter(IndustryEvent.id == event_id).first()
            if not record:
                return False
            self._apply_event(record, event)
            record.updated_at = utcnow()
            return True

    # Source registry

    def record_fetch_outcome(self, source_id: Optional[int], ok: bool, item_count: int = 0,
                             error: Optional[str] = None):
        """The only writer of a source's fetch counters"""
        if source_id is None:
            return

        with self._session() as db:
            source = db.query(Source).filter(Source.id == source_id).first()
            if not source:
                return
            if ok:
                source.success_count = (source.success_count or 0) + 1
                source.total_items_count = (source.total_items_count or 0) + item_count
                source.last_fetched_at = utcnow()
                source.last_error = None
            else:
                source.failure_count = (source.failure_count or 0) + 1
                source.last_error = (error or "")[:1000]

    def list_active_sources(self, family: str) -> List[SourceDescriptor]:
        with self._session() as db:
            rows = db.query(Source).filter(
                Source.family == family,
                Source.is_active == True  # noqa: E712
            ).order_by(Source.id).all()

            return [
                SourceDescriptor(
                    id=row.id,
                    name=row.name,
                    endpoint=row.endpoint,
                    region=row.region,
                    fetch_kind=row.fetch_kind,
                    family=row.family,
                    category=row.category,
                    keyword_filter=bool(row.keyword_filter),
                    extract_body=bool(row.extract_body),
                    item_selector=row.item_selector,
                )
                for row in rows
            ]

    def count_sources(self) -> int:
        with self._session() as db:
            return db.query(Source).count()

    def seed_sources(self, rows: Iterable[Dict]) -> int:
        """Insert rows whose endpoint is not registered yet; returns how many"""
        with self._session() as db:
            existing = set(endpoint for (endpoint,) in db.query(Source.endpoint).all())
            added = 0
            for row in rows:
                if row["endpoint"] in existing:
                    continue
                db.add(Source(**row))
                existing.add(row["endpoint"])
                added += 1
            return added

    # Translation state machine

    def claim_pending(self, limit: int) -> List[PendingTranslation]:
        """Oldest Pending records first"""
        with self._session() as db:
            rows = db.query(NewsArticle).filter(
                NewsArticle.translation_status == TranslationStatus.PENDING.value
            ).order_by(NewsArticle.id).limit(limit).all()

            return [
                PendingTranslation(
                    id=row.id,
                    title=row.title,
                    summary=row.summary,
                    content=row.content,
                    content_extracted=bool(row.content_extracted),
                )
                for row in rows
            ]

    def mark_translated(self, news_id: int, title_zh: str, summary_zh: str, content_zh: str) -> bool:
        """
        Pending -> Translated. Returns False when the record has already left
        Pending (another sweep settled it first) and nothing was written.
        """
        with self._session() as db:
            applied = db.query(NewsArticle).filter(
                NewsArticle.id == news_id,
                NewsArticle.translation_status == TranslationStatus.PENDING.value
            ).update({
                NewsArticle.title_zh: title_zh,
                NewsArticle.summary_zh: summary_zh,
                NewsArticle.content_zh: content_zh,
                NewsArticle.translation_status: TranslationStatus.TRANSLATED.value,
                NewsArticle.translated_at: utcnow(),
            }, synchronize_session=False)
            return applied > 0

    def mark_translation_failed(self, news_id: int, max_retries: int = None) -> Optional[int]:
        """
        Pending -> Failed with retries + 1, never above max_retries.

        Returns the new retry count, or None when the record was no longer
        Pending and the transition did not apply.
        """
        if max_retries is None:
            max_retries = settings.TRANSLATION_MAX_RETRIES

        with self._session() as db:
            applied = db.query(NewsArticle).filter(
                NewsArticle.id == news_id,
                NewsArticle.translation_status == TranslationStatus.PENDING.value
            ).update({
                NewsArticle.translation_retries: case(
                    (NewsArticle.translation_retries < max_retries, NewsArticle.translation_retries + 1),
                    else_=max_retries
                ),
                NewsArticle.translation_status: TranslationStatus.FAILED.value,
            }, synchronize_session=False)
            if not applied:
                return None

            return db.query(NewsArticle.translation_retries).filter(
                NewsArticle.id == news_id
            ).scalar()

    def requeue_failed(self, max_retries: int) -> int:
        """Failed records still under the retry bound go back to Pending"""
        with self._session() as db:
            count = db.query(NewsArticle).filter(
                NewsArticle.translation_status == TranslationStatus.FAILED.value,
                NewsArticle.translation_retries < max_retries
            ).update(
                {NewsArticle.translation_status: TranslationStatus.PENDING.value},
                synchronize_session=False
            )
            return count

    # Excerpts

    def find_excerpt_candidates(self, limit: int, thin_chars: int) -> List[ExcerptCandidate]:
        """Newest records with an extracted body, a thin summary and no excerpt yet"""
        with self._session() as db:
            rows = db.query(NewsArticle).filter(
                NewsArticle.excerpt.is_(None),
                NewsArticle.content_extracted.is_(True),
                func.length(NewsArticle.summary) < thin_chars
            ).order_by(NewsArticle.published_at.desc(), NewsArticle.id.desc()).limit(limit).all()

            return [
                ExcerptCandidate(
                    id=row.id,
                    title=row.title,
                    content=row.content,
                    region=row.region,
                )
                for row in rows
            ]

    def store_excerpt(self, news_id: int, excerpt: str, excerpt_zh: Optional[str]) -> bool:
        """Write-once; False when the record already has an excerpt or is gone"""
        with self._session() as db:
            applied = db.query(NewsArticle).filter(
                NewsArticle.id == news_id,
                NewsArticle.excerpt.is_(None)
            ).update({
                NewsArticle.excerpt: excerpt,
                NewsArticle.excerpt_zh: excerpt_zh,
                NewsArticle.excerpt_generated_at: utcnow(),
            }, synchronize_session=False)
            return applied > 0


news_storage = NewsStorage()
