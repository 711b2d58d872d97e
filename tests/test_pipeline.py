import threading
from datetime import datetime

import pytest
from sqlalchemy.exc import SQLAlchemyError

from ainews.config.sources import KNOWN_EVENTS_ENDPOINT
from ainews.errors import PersistenceUnavailable, SourceUnavailable
from ainews.models.content import IndustryEvent, NewsArticle, Source, TranslationStatus
from ainews.services.pipeline import IngestionPipeline
from ainews.services.scrapers.base import RawCandidate, RawEvent
from ainews.services.scrapers.manager import ScraperManager
from ainews.services.storage import NewsStorage

FULL_BODY = "The full article explains the architecture of the new model in detail. " * 5


def _feed(items_by_source):
    def adapter(source):
        items = items_by_source.get(source.name)
        if isinstance(items, Exception):
            raise items
        return list(items or [])
    return adapter


def _candidate(source_name, title, link):
    return RawCandidate(source_name, title, f"Summary of {title}", link, datetime(2026, 10, 1, 8, 0))


def _pipeline(adapters, extractor=None, storage=None):
    return IngestionPipeline(
        storage=storage or NewsStorage(),
        fetcher=ScraperManager(adapters=adapters, max_workers=2),
        extractor=extractor or (lambda url: FULL_BODY)
    )


def test_new_international_item_is_saved_pending(add_source, query):
    add_source(name="TechCrunch", endpoint="https://techcrunch.com/feed/")
    items = {"TechCrunch": [_candidate("TechCrunch", "New GPT Model Released", "https://example.com/a")]}

    report = _pipeline({"feed": _feed(items)}).run_family("news")

    assert (report.fetched, report.saved, report.skipped, report.failed) == (1, 1, 0, 0)
    assert not report.aborted
    row = query(NewsArticle)[0]
    assert row.title == "New GPT Model Released"
    assert row.source_url == "https://example.com/a"
    assert row.translation_status == TranslationStatus.PENDING
    assert row.content == FULL_BODY
    assert row.content_extracted is True
    assert row.summary == "Summary of New GPT Model Released"


def test_running_twice_saves_nothing_new(add_source, query):
    source_id = add_source(name="TechCrunch", endpoint="https://techcrunch.com/feed/")
    items = {"TechCrunch": [
        _candidate("TechCrunch", "New GPT Model Released", "https://example.com/a"),
        _candidate("TechCrunch", "LLM benchmarks", "https://example.com/b"),
    ]}
    pipeline = _pipeline({"feed": _feed(items)})

    first = pipeline.run_family("news")
    second = pipeline.run_family("news")

    assert first.saved == 2
    assert second.saved == 0
    assert second.skipped == 2
    assert len(query(NewsArticle)) == 2

    source = query(Source, id=source_id)[0]
    assert source.success_count == 2
    assert source.total_items_count == 4


def test_same_link_from_two_sources_is_saved_once(add_source, query):
    add_source(name="A", endpoint="https://a.example/feed")
    add_source(name="B", endpoint="https://b.example/feed")
    items = {
        "A": [_candidate("A", "GPT launch", "https://example.com/shared")],
        "B": [_candidate("B", "GPT launch (copy)", "https://example.com/shared?utm_source=b")],
    }

    report = _pipeline({"feed": _feed(items)}).run_family("news")

    assert report.saved == 1
    assert report.skipped == 1
    assert len(query(NewsArticle)) == 1


def test_domestic_item_needs_no_translation_and_skips_extraction(add_source, query):
    add_source(name="量子位", endpoint="https://www.qbitai.com/feed", region="domestic", extract_body=False)
    items = {"量子位": [_candidate("量子位", "国产大模型发布", "https://www.qbitai.com/1")]}
    calls = []

    def extractor(url):
        calls.append(url)
        return FULL_BODY

    report = _pipeline({"feed": _feed(items)}, extractor=extractor).run_family("news")

    assert report.saved == 1
    assert calls == []
    row = query(NewsArticle)[0]
    assert row.translation_status == TranslationStatus.NOT_NEEDED
    assert row.content == row.summary
    assert row.content_extracted is False


def test_failed_extraction_keeps_summary_as_body(add_source, query):
    add_source()
    items = {"Example Feed": [_candidate("Example Feed", "AI chip news", "https://example.com/chip")]}

    def extractor(url):
        raise RuntimeError("parser crashed")

    report = _pipeline({"feed": _feed(items)}, extractor=extractor).run_family("news")

    assert report.saved == 1
    row = query(NewsArticle)[0]
    assert row.content == row.summary
    assert row.content_extracted is False


def test_failing_source_is_counted_and_run_continues(add_source, query):
    good_id = add_source(name="Good", endpoint="https://good.example/feed")
    bad_id = add_source(name="Bad", endpoint="https://bad.example/feed")
    items = {
        "Good": [_candidate("Good", "AI regulation update", "https://example.com/reg")],
        "Bad": SourceUnavailable("Bad", "HTTP 503"),
    }

    report = _pipeline({"feed": _feed(items)}).run_family("news")

    assert report.saved == 1
    assert not report.aborted
    assert query(Source, id=good_id)[0].success_count == 1
    bad = query(Source, id=bad_id)[0]
    assert bad.failure_count == 1
    assert bad.success_count == 0
    assert "HTTP 503" in bad.last_error


def test_unreachable_database_aborts_run(add_source):
    class DownStorage(NewsStorage):
        def ping(self):
            raise PersistenceUnavailable("connection refused")

    add_source()
    pipeline = _pipeline({"feed": _feed({})}, storage=DownStorage())

    report = pipeline.run_family("news")

    assert report.aborted
    assert report.saved == 0
    assert not pipeline.is_running("news")


def test_busy_family_skips_second_trigger(add_source):
    add_source()
    started = threading.Event()
    release = threading.Event()

    def slow_adapter(source):
        started.set()
        release.wait(timeout=5)
        return []

    pipeline = _pipeline({"feed": slow_adapter})
    worker = threading.Thread(target=pipeline.run_family, args=("news",))
    worker.start()
    try:
        assert started.wait(timeout=5)
        second = pipeline.run_family("news")
        assert second.skipped_busy
        # Other families are not blocked
        assert not pipeline.run_family("events_api").skipped_busy
    finally:
        release.set()
        worker.join(timeout=5)

    assert not pipeline.is_running("news")


def test_unknown_family_is_rejected(db_engine):
    with pytest.raises(ValueError):
        _pipeline({}).run_family("podcasts")


def test_events_are_updated_in_place_by_name(add_source, query):
    add_source(
        name="Known AI conferences", endpoint=KNOWN_EVENTS_ENDPOINT, region="domestic",
        fetch_kind="static-api", family="events_known", category="event",
        keyword_filter=False, extract_body=False
    )
    payload = {"description": "World AI Conference"}

    def adapter(source):
        return [RawEvent(
            source_name=source.name,
            name="WAIC 2026",
            description=payload["description"],
            start_date=datetime(2026, 7, 26),
            location="上海世博中心"
        )]

    pipeline = _pipeline({"static-api": adapter})

    first = pipeline.run_family("events_known")
    payload["description"] = "World AI Conference, updated agenda"
    second = pipeline.run_family("events_known")

    assert (first.saved, first.updated) == (1, 0)
    assert (second.saved, second.updated) == (0, 1)
    rows = query(IndustryEvent)
    assert len(rows) == 1
    assert rows[0].description == "World AI Conference, updated agenda"
    assert rows[0].type == "offline"
    assert rows[0].region == "domestic"


def test_duplicate_event_names_within_run_merge(add_source, query):
    add_source(
        name="Events API", endpoint="https://events.example/api", fetch_kind="static-api",
        family="events_api", category="event"
    )

    def adapter(source):
        return [
            RawEvent(source.name, "ICLR 2027", "first copy", datetime(2027, 4, 24)),
            RawEvent(source.name, "ICLR 2027", "second copy", datetime(2027, 4, 24)),
        ]

    report = _pipeline({"static-api": adapter}).run_family("events_api")

    assert report.saved == 1
    rows = query(IndustryEvent)
    assert len(rows) == 1
    assert rows[0].description == "second copy"


def test_counter_write_error_does_not_lose_the_run(add_source, query):
    class CounterlessStorage(NewsStorage):
        def record_fetch_outcome(self, source_id, ok, item_count=0, error=None):
            raise SQLAlchemyError("deadlock detected")

    add_source()
    items = {"Example Feed": [_candidate("Example Feed", "AI chip news", "https://example.com/chip")]}

    report = _pipeline({"feed": _feed(items)}, storage=CounterlessStorage()).run_family("news")

    assert report.saved == 1
    assert not report.aborted
    assert len(query(NewsArticle)) == 1
