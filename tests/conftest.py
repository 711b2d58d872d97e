from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import ainews.models as models
from ainews.config import settings
from ainews.models import Base
from ainews.models import content  # noqa: F401
from ainews.models.content import Source
from ainews.services.normalizer import NormalizedEvent, NormalizedItem
from ainews.services.scrapers.base import SourceDescriptor
from ainews.utils.url_utils import url_hash


@pytest.fixture
def db_engine(monkeypatch):
    """In-memory SQLite shared by every session the code under test opens"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    monkeypatch.setattr(models, "engine", engine)
    monkeypatch.setattr(models, "SessionLocal", session_factory)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def query(db_engine):
    """Run a query in a fresh session so results reflect committed state"""
    def run(model, **filters):
        db = models.SessionLocal()
        try:
            return db.query(model).filter_by(**filters).order_by(model.id).all()
        finally:
            db.close()
    return run


@pytest.fixture
def add_source(db_engine):
    def add(**overrides) -> int:
        row = {
            "name": "Example Feed",
            "endpoint": "https://example.com/feed",
            "region": "international",
            "fetch_kind": "feed",
            "family": "news",
            "category": "tech",
            "keyword_filter": True,
            "extract_body": True,
        }
        row.update(overrides)
        db = models.SessionLocal()
        try:
            source = Source(**row)
            db.add(source)
            db.commit()
            return source.id
        finally:
            db.close()
    return add


@pytest.fixture(autouse=True)
def quiet_settings(monkeypatch):
    monkeypatch.setattr(settings, "TRANSLATION_DELAY_SECONDS", 0)
    monkeypatch.setattr(settings, "EXTRACT_FULL_CONTENT", True)
    monkeypatch.setattr(settings, "TRANSLATE_FULL_BODY", True)
    monkeypatch.setattr(settings, "TRANSLATION_MAX_RETRIES", 3)
    monkeypatch.setattr(settings, "ITEMS_PER_SOURCE", 10)


def make_source(**overrides) -> SourceDescriptor:
    fields = {
        "id": None,
        "name": "Example Feed",
        "endpoint": "https://example.com/feed",
        "region": "international",
        "fetch_kind": "feed",
        "family": "news",
    }
    fields.update(overrides)
    return SourceDescriptor(**fields)


def make_item(**overrides) -> NormalizedItem:
    fields = {
        "title": "New GPT Model Released",
        "summary": "OpenAI announced a new language model today.",
        "body": "OpenAI announced a new language model today.",
        "link": "https://example.com/a",
        "published_at": datetime(2026, 10, 1, 8, 0),
        "source": "Example Feed",
        "region": "international",
        "category": "tech",
        "content_fingerprint": "",
    }
    fields.update(overrides)
    if not fields["content_fingerprint"]:
        fields["content_fingerprint"] = url_hash(fields["link"])
    return NormalizedItem(**fields)


def make_event(**overrides) -> NormalizedEvent:
    fields = {
        "name": "WAIC 2026",
        "description": "World Artificial Intelligence Conference",
        "start_date": datetime(2026, 7, 4),
        "end_date": datetime(2026, 7, 7),
        "location": "Shanghai",
        "type": "offline",
        "region": "domestic",
        "url": "https://www.worldaic.com.cn/",
        "registration_url": None,
        "speakers": None,
        "agenda": None,
        "expected_attendees": None,
        "source": "Known AI conferences",
    }
    fields.update(overrides)
    return NormalizedEvent(**fields)
