from enum import IntEnum

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String, Text, TIMESTAMP
from sqlalchemy.sql import func

from . import Base

REGIONS = ("domestic", "international")
FETCH_KINDS = ("feed", "scrape", "static-api")
FAMILIES = ("news", "events_known", "events_api")
NEWS_FAMILIES = ("news",)
EVENT_FAMILIES = ("events_known", "events_api")
CATEGORIES = ("tech", "product", "industry", "event", "manufacturer")
EVENT_TYPES = ("online", "offline")


class TranslationStatus(IntEnum):
    NOT_NEEDED = 0
    PENDING = 1
    TRANSLATED = 2
    FAILED = 3


def _in(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Source(Base):
    __tablename__ = "sources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    endpoint = Column(String(512), nullable=False, unique=True)
    description = Column(Text)
    region = Column(String(20), nullable=False, default="international")
    fetch_kind = Column(String(20), nullable=False, default="feed")
    family = Column(String(20), nullable=False, default="news")
    category = Column(String(20), nullable=False, default="tech")
    keyword_filter = Column(Boolean, nullable=False, default=True)
    extract_body = Column(Boolean, nullable=False, default=True)
    item_selector = Column(String(255))
    is_active = Column(Boolean, nullable=False, default=True)

    # Fetch telemetry, written only through NewsStorage.record_fetch_outcome
    last_fetched_at = Column(TIMESTAMP)
    success_count = Column(Integer, nullable=False, default=0)
    failure_count = Column(Integer, nullable=False, default=0)
    total_items_count = Column(Integer, nullable=False, default=0)
    last_error = Column(Text)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(_in("region", REGIONS), name="source_valid_region"),
        CheckConstraint(_in("fetch_kind", FETCH_KINDS), name="source_valid_fetch_kind"),
        CheckConstraint(_in("family", FAMILIES), name="source_valid_family"),
        CheckConstraint(_in("category", CATEGORIES), name="source_valid_category"),
    )


class NewsArticle(Base):
    __tablename__ = "ai_news"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text, nullable=False)
    summary = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    source_url = Column(String(1024), nullable=False, index=True)
    content_hash = Column(String(64), nullable=False, index=True)
    source = Column(String(255))
    category = Column(String(20), nullable=False, default="tech")
    region = Column(String(20), nullable=False, default="international")
    published_at = Column(TIMESTAMP, nullable=False)
    content_extracted = Column(Boolean, nullable=False, default=False)

    translation_status = Column(Integer, nullable=False, default=TranslationStatus.NOT_NEEDED.value, index=True)
    translation_retries = Column(Integer, nullable=False, default=0)
    title_zh = Column(Text)
    summary_zh = Column(Text)
    content_zh = Column(Text)
    translated_at = Column(TIMESTAMP)

    # LLM digest for items whose feed text is thin; excerpt_zh only for international news
    excerpt = Column(Text)
    excerpt_zh = Column(Text)
    excerpt_generated_at = Column(TIMESTAMP)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(_in("region", REGIONS), name="news_valid_region"),
        CheckConstraint(_in("category", CATEGORIES), name="news_valid_category"),
        CheckConstraint("translation_status IN (0, 1, 2, 3)", name="news_valid_translation_status"),
        CheckConstraint(
            "translation_status = 0 OR region = 'international'",
            name="news_translation_only_international"
        ),
        CheckConstraint("translation_retries >= 0", name="news_retries_non_negative"),
    )


class IndustryEvent(Base):
    __tablename__ = "ai_events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(512), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    url = Column(String(1024))
    source = Column(String(255))
    category = Column(String(20), nullable=False, default="event")
    region = Column(String(20), nullable=False, default="international")
    start_date = Column(TIMESTAMP, nullable=False)
    end_date = Column(TIMESTAMP)
    location = Column(Text)
    type = Column(String(20), nullable=False, default="offline")
    registration_url = Column(Text)
    speakers = Column(Text)
    agenda = Column(Text)
    expected_attendees = Column(Integer)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(_in("region", REGIONS), name="event_valid_region"),
        CheckConstraint(_in("type", EVENT_TYPES), name="event_valid_type"),
    )
