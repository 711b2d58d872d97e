from unittest.mock import MagicMock

import pytest

from ainews.errors import PersistenceUnavailable, TranslationFailed
from ainews.models.content import NewsArticle
from ainews.services.excerpt_generator import ExcerptGenerator
from ainews.services.storage import NewsStorage

from conftest import make_item

LONG_BODY = "The lab described how the new model was trained and evaluated. " * 20


@pytest.fixture
def storage(db_engine):
    return NewsStorage()


def _extracted(**overrides):
    item = make_item(body=LONG_BODY, summary="Short teaser.", **overrides)
    item.body_extracted = True
    return item


def _service(excerpt="A digest of the article.", translated="文章摘要。"):
    service = MagicMock()
    service.generate_excerpt.return_value = excerpt
    service.translate_body.return_value = translated
    return service


def test_thin_international_item_gets_excerpt_and_translation(storage, query):
    news_id = storage.insert_news(_extracted())
    service = _service()

    report = ExcerptGenerator(storage, service).run_excerpt_sweep()

    assert (report.candidates, report.generated, report.fallback) == (1, 1, 0)
    row = query(NewsArticle, id=news_id)[0]
    assert row.excerpt == "A digest of the article."
    assert row.excerpt_zh == "文章摘要。"
    assert row.excerpt_generated_at is not None
    service.generate_excerpt.assert_called_once_with("New GPT Model Released", LONG_BODY)


def test_domestic_excerpt_is_not_translated(storage, query):
    news_id = storage.insert_news(_extracted(region="domestic", link="https://example.com/dom"))
    service = _service(excerpt="国产大模型发布会的详细摘要。")

    ExcerptGenerator(storage, service).run_excerpt_sweep()

    row = query(NewsArticle, id=news_id)[0]
    assert row.excerpt == "国产大模型发布会的详细摘要。"
    assert row.excerpt_zh is None
    service.translate_body.assert_not_called()


def test_only_thin_extracted_items_are_candidates(storage):
    storage.insert_news(make_item(link="https://example.com/not-extracted", summary="Short teaser."))
    rich = _extracted(link="https://example.com/rich")
    rich.summary = "A long feed summary that already explains the story in detail. " * 5
    storage.insert_news(rich)
    service = _service()

    report = ExcerptGenerator(storage, service).run_excerpt_sweep()

    assert report.candidates == 0
    service.generate_excerpt.assert_not_called()


def test_failed_generation_falls_back_to_body_start(storage, query):
    news_id = storage.insert_news(_extracted())
    service = _service()
    service.generate_excerpt.side_effect = TranslationFailed("overloaded")

    report = ExcerptGenerator(storage, service).run_excerpt_sweep()

    assert (report.generated, report.fallback) == (0, 1)
    row = query(NewsArticle, id=news_id)[0]
    assert LONG_BODY.startswith(row.excerpt)
    assert len(row.excerpt) <= 500


def test_excerpt_is_written_once(storage):
    storage.insert_news(_extracted())
    service = _service()
    generator = ExcerptGenerator(storage, service)

    generator.run_excerpt_sweep()
    second = generator.run_excerpt_sweep()

    assert second.candidates == 0
    assert service.generate_excerpt.call_count == 1


def test_unreachable_database_aborts_sweep():
    storage = MagicMock()
    storage.find_excerpt_candidates.side_effect = PersistenceUnavailable("connection refused")

    report = ExcerptGenerator(storage, _service()).run_excerpt_sweep()

    assert report.aborted
