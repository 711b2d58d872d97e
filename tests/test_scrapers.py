import threading
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import requests

from ainews.config.sources import KNOWN_EVENTS_ENDPOINT, default_sources
from ainews.errors import SourceUnavailable
from ainews.services.scrapers.base import RawCandidate, RawEvent
from ainews.services.scrapers.event_api import fetch_events, parse_event_payload
from ainews.services.scrapers.html_listing import parse_listing
from ainews.services.scrapers.event_listing import fetch_event_listing, parse_date_range, parse_event_listing
from ainews.services.scrapers.known_events import fetch_known_events
from ainews.services.scrapers.manager import ScraperManager
from ainews.services.scrapers.rss_feed import fetch_feed
from ainews.services.source_registry import validate_source_kind

from conftest import make_source

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example</title>
    <item>
      <title>New GPT Model Released</title>
      <link>https://example.com/a</link>
      <description>&lt;p&gt;OpenAI announced a new model.&lt;/p&gt;</description>
      <pubDate>Thu, 01 Oct 2026 08:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Entry without a date</title>
      <link>https://example.com/b</link>
    </item>
    <item>
      <title>Entry without a link</title>
    </item>
  </channel>
</rss>
"""


def _response(content=b"", text="", payload=None):
    response = MagicMock()
    response.content = content
    response.text = text
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


def test_fetch_feed_parses_entries_in_order():
    with patch("ainews.services.scrapers.rss_feed.requests.get", return_value=_response(content=RSS)) as mock_get:
        items = fetch_feed(make_source())

    assert [item.link for item in items] == ["https://example.com/a", "https://example.com/b"]
    assert items[0].title == "New GPT Model Released"
    assert items[0].published_at == datetime(2026, 10, 1, 8, 0)
    assert "OpenAI announced" in items[0].description
    assert isinstance(items[1].published_at, datetime)
    assert mock_get.call_args.kwargs["timeout"] == 10


def test_fetch_feed_network_error_is_source_unavailable():
    with patch("ainews.services.scrapers.rss_feed.requests.get", side_effect=requests.Timeout("slow")):
        with pytest.raises(SourceUnavailable) as excinfo:
            fetch_feed(make_source(name="Slow Feed"))

    assert excinfo.value.source_name == "Slow Feed"


def test_parse_listing_uses_cards_and_absolutizes_links():
    html = """
    <main>
      <article class="post">
        <h2>Introducing Claude for research</h2>
        <a href="/news/claude-research">Read more</a>
        <p>A new way to run long research tasks.</p>
        <time datetime="2026-09-30T12:00:00Z">Sep 30</time>
      </article>
      <div class="news-item">
        <h3 class="title">Model card update</h3>
        <a href="https://www.anthropic.com/news/model-card">Read</a>
      </div>
      <article><p>Card without a title</p><a href="/x">x</a></article>
    </main>
    """
    source = make_source(name="Anthropic", endpoint="https://www.anthropic.com/news", fetch_kind="scrape")

    items = parse_listing(html, source)

    assert [item.title for item in items] == ["Introducing Claude for research", "Model card update"]
    assert items[0].link == "https://www.anthropic.com/news/claude-research"
    assert items[0].description == "A new way to run long research tasks."
    assert items[0].published_at == datetime(2026, 9, 30, 12, 0)


def test_parse_event_payload_accepts_aliases_and_skips_incomplete():
    payload = {"data": [
        {
            "title": "NeurIPS 2026",
            "startDate": "2026-12-06",
            "endDate": "2026-12-12",
            "venue": "Vancouver",
            "registrationUrl": "https://neurips.cc/register",
            "speakers": [{"name": "Yoshua Bengio"}, {"name": "Fei-Fei Li"}],
            "isOnline": False,
            "attendees": "15000",
        },
        {"title": "No date event"},
        {"startDate": "2026-12-06"},
    ]}
    source = make_source(name="NeurIPS", fetch_kind="static-api", family="events_api")

    events = parse_event_payload(payload, source)

    assert len(events) == 1
    event = events[0]
    assert event.name == "NeurIPS 2026"
    assert event.start_date == datetime(2026, 12, 6)
    assert event.location == "Vancouver"
    assert event.speakers == "Yoshua Bengio, Fei-Fei Li"
    assert event.event_type == "offline"
    assert event.expected_attendees == 15000
    assert event.registration_url == "https://neurips.cc/register"


def test_fetch_events_rejects_invalid_json():
    response = _response()
    response.json.side_effect = ValueError("Expecting value")
    source = make_source(name="Broken API", fetch_kind="static-api", family="events_api")

    with patch("ainews.services.scrapers.event_api.requests.get", return_value=response):
        with pytest.raises(SourceUnavailable):
            fetch_events(source)


def test_known_events_window():
    source = make_source(endpoint=KNOWN_EVENTS_ENDPOINT, fetch_kind="static-api", family="events_known")

    current = fetch_known_events(source, now=datetime(2026, 10, 18))
    far_future = fetch_known_events(source, now=datetime(2035, 1, 1))

    assert any(event.name == "NeurIPS 2026" for event in current)
    assert far_future == []


def test_fetch_events_dispatches_builtin_endpoint_without_network():
    source = make_source(endpoint=KNOWN_EVENTS_ENDPOINT, fetch_kind="static-api", family="events_known")

    with patch("ainews.services.scrapers.event_api.requests.get") as mock_get:
        fetch_events(source)

    mock_get.assert_not_called()


def _candidates(source, titles):
    return [
        RawCandidate(source.name, title, "", f"https://example.com/{i}", datetime(2026, 10, 1))
        for i, title in enumerate(titles)
    ]


def test_manager_isolates_failing_sources():
    good = make_source(name="Good", endpoint="https://good.example/feed")
    bad = make_source(name="Bad", endpoint="https://bad.example/feed")

    def adapter(source):
        if source.name == "Bad":
            raise SourceUnavailable(source.name, "HTTP 503")
        return _candidates(source, ["AI chips ship"])

    manager = ScraperManager(adapters={"feed": adapter}, max_workers=2)
    outcomes = {outcome.source.name: outcome for outcome in manager.fetch_all([good, bad])}

    assert outcomes["Good"].ok
    assert len(outcomes["Good"].items) == 1
    assert not outcomes["Bad"].ok
    assert outcomes["Bad"].error == "HTTP 503"


def test_manager_applies_keyword_gate_before_cap():
    source = make_source(keyword_filter=True)
    titles = ["Sports results"] + [f"LLM update {i}" for i in range(12)]
    manager = ScraperManager(adapters={"feed": lambda s: _candidates(s, titles)}, items_per_source=10)

    outcome = manager.fetch_source(source)

    assert len(outcome.items) == 10
    assert outcome.items[0].title == "LLM update 0"


def test_manager_unknown_fetch_kind_is_an_error_outcome():
    outcome = ScraperManager(adapters={}).fetch_source(make_source(fetch_kind="carrier-pigeon"))
    assert not outcome.ok


def test_default_sources_are_consistent():
    rows = default_sources()
    endpoints = [row["endpoint"] for row in rows]

    assert len(endpoints) == len(set(endpoints))
    for row in rows:
        assert validate_source_kind(row["family"], row["fetch_kind"]) is None
    assert any(row["family"] == "events_api" and row["fetch_kind"] == "scrape" for row in rows)


RELATIVE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Lab blog</title>
    <item>
      <title>Scaling LLM inference</title>
      <link>/blog/scaling-inference</link>
    </item>
  </channel>
</rss>
"""


def test_fetch_feed_resolves_relative_links_against_feed_url():
    source = make_source(endpoint="https://lab.example.com/feed.xml")

    with patch("ainews.services.scrapers.rss_feed.requests.get", return_value=_response(content=RELATIVE_RSS)):
        items = fetch_feed(source)

    assert [item.link for item in items] == ["https://lab.example.com/blog/scaling-inference"]


def test_sources_are_fetched_in_parallel():
    # Each adapter waits for the other; one-at-a-time fetching would time out
    barrier = threading.Barrier(2, timeout=5)
    first = make_source(name="First", endpoint="https://first.example/feed")
    second = make_source(name="Second", endpoint="https://second.example/feed")

    def adapter(source):
        barrier.wait()
        return _candidates(source, ["AI chips ship"])

    manager = ScraperManager(adapters={"feed": adapter}, max_workers=2)
    outcomes = list(manager.fetch_all([first, second]))

    assert sorted(outcome.source.name for outcome in outcomes) == ["First", "Second"]
    assert all(outcome.ok for outcome in outcomes)


EVENT_LISTING = """
<div class="search-tab-content">
  <div class="search-tab-content-item">
    <div class="item-title"><a href="/event/123">2026人工智能开发者大会</a></div>
    <div class="item-time">2026-11-20 09:00 ~ 2026-11-21 18:00</div>
    <div class="item-location">北京国家会议中心</div>
  </div>
  <div class="search-tab-content-item">
    <div class="item-title"><a href="https://www.huodongxing.com/event/456">大模型应用线上分享</a></div>
    <div class="item-time">2026年12月3日 19:30</div>
  </div>
  <div class="search-tab-content-item">
    <div class="item-title"><a href="/event/789">时间待定的AI沙龙</a></div>
    <div class="item-time">待定</div>
  </div>
</div>
"""


def test_parse_event_listing_reads_cards_and_drops_undated():
    source = make_source(
        name="活动行 AI", endpoint="https://www.huodongxing.com/search?qs=ai", region="domestic",
        fetch_kind="scrape", family="events_api", item_selector=".search-tab-content-item"
    )

    events = parse_event_listing(EVENT_LISTING, source)

    assert [event.name for event in events] == ["2026人工智能开发者大会", "大模型应用线上分享"]
    first = events[0]
    assert first.start_date == datetime(2026, 11, 20)
    assert first.end_date == datetime(2026, 11, 21)
    assert first.location == "北京国家会议中心"
    assert first.registration_url == "https://www.huodongxing.com/event/123"
    assert first.region == "domestic"
    assert events[1].start_date == datetime(2026, 12, 3)
    assert events[1].end_date is None


def test_parse_date_range_ignores_end_before_start():
    assert parse_date_range("2026/7/26 - 2026/7/28") == (datetime(2026, 7, 26), datetime(2026, 7, 28))
    assert parse_date_range("2026-07-28 / 2026-07-26") == (datetime(2026, 7, 28), None)
    assert parse_date_range("coming soon") == (None, None)


def test_fetch_event_listing_network_error_is_source_unavailable():
    source = make_source(name="活动行 AI", fetch_kind="scrape", family="events_api")

    with patch("ainews.services.scrapers.event_listing.requests.get", side_effect=requests.ConnectionError("reset")):
        with pytest.raises(SourceUnavailable):
            fetch_event_listing(source)


def test_manager_routes_scraped_event_sources_to_event_parser():
    source = make_source(name="活动行 AI", fetch_kind="scrape", family="events_api", keyword_filter=True)
    events = [
        RawEvent(source.name, "人工智能峰会", "", datetime(2026, 11, 20)),
        RawEvent(source.name, "Cooking class", "", datetime(2026, 11, 21)),
    ]

    def news_listing(source):
        raise AssertionError("news listing parser used for an event source")

    manager = ScraperManager(adapters={"scrape": news_listing, "event-scrape": lambda s: events})
    outcome = manager.fetch_source(source)

    assert outcome.ok
    assert [event.name for event in outcome.items] == ["人工智能峰会"]
