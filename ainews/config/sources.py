"""
Default source registry

Seeded into the `sources` table on first start. After that the table is the
source of truth and admins manage it through /api/admin/sources.
"""

from typing import Dict, List

KNOWN_EVENTS_ENDPOINT = "builtin:known-events"

DOMESTIC_RSS_SOURCES: List[Dict] = [
    {"name": "机器之心", "endpoint": "https://www.jiqizhixin.com/rss"},
    {"name": "量子位", "endpoint": "https://www.qbitai.com/feed"},
    {"name": "36Kr", "endpoint": "https://36kr.com/feed"},
    {"name": "IT 之家", "endpoint": "https://www.ithome.com/rss/"},
    {"name": "极客公园", "endpoint": "https://www.geekpark.net/rss"},
    {"name": "爱范儿", "endpoint": "https://www.ifanr.com/feed"},
    {"name": "钛媒体", "endpoint": "https://www.tmtpost.com/rss.xml"},
]

INTERNATIONAL_RSS_SOURCES: List[Dict] = [
    {"name": "Hacker News", "endpoint": "https://news.ycombinator.com/rss"},
    {"name": "TechCrunch", "endpoint": "https://techcrunch.com/feed/"},
    {"name": "The Verge", "endpoint": "https://www.theverge.com/rss/index.xml"},
    {"name": "MIT Technology Review", "endpoint": "https://www.technologyreview.com/feed/"},
    {"name": "ArXiv AI", "endpoint": "https://rss.arxiv.org/rss/cs.AI"},
    {"name": "Towards Data Science", "endpoint": "https://towardsdatascience.com/feed"},
    {"name": "Analytics Vidhya", "endpoint": "https://www.analyticsvidhya.com/feed/"},
    {"name": "Medium AI", "endpoint": "https://medium.com/feed/tag/artificial-intelligence"},
]

# Official AI company sources: everything they publish is relevant, so no keyword gate
AI_COMPANY_SOURCES: List[Dict] = [
    {"name": "OpenAI", "endpoint": "https://openai.com/news/rss.xml", "fetch_kind": "feed"},
    {"name": "Google DeepMind", "endpoint": "https://deepmind.google/blog/rss.xml", "fetch_kind": "feed"},
    {"name": "Hugging Face", "endpoint": "https://huggingface.co/blog/feed.xml", "fetch_kind": "feed"},
    {"name": "NVIDIA AI", "endpoint": "https://blogs.nvidia.com/feed/", "fetch_kind": "feed"},
    {"name": "Anthropic", "endpoint": "https://www.anthropic.com/news", "fetch_kind": "scrape"},
    {"name": "Meta AI", "endpoint": "https://ai.meta.com/blog/", "fetch_kind": "scrape"},
    {"name": "Mistral AI", "endpoint": "https://mistral.ai/news/", "fetch_kind": "scrape"},
]

EVENT_API_SOURCES: List[Dict] = [
    {"name": "NeurIPS", "endpoint": "https://neurips.cc/api/events", "region": "international"},
    {"name": "ICML", "endpoint": "https://icml.cc/api/events", "region": "international"},
    {"name": "AAAI", "endpoint": "https://aaai.org/api/conferences", "region": "international"},
    {"name": "36Kr 活动", "endpoint": "https://api.36kr.com/events?category=ai&status=upcoming", "region": "domestic"},
]

# Activity platforms without an API; cards are scraped
EVENT_LISTING_SOURCES: List[Dict] = [
    {
        "name": "活动行 AI",
        "endpoint": "https://www.huodongxing.com/search?qs=%E4%BA%BA%E5%B7%A5%E6%99%BA%E8%83%BD",
        "region": "domestic",
        "item_selector": ".search-tab-content-item",
    },
]


def default_sources() -> List[Dict]:
    """Full default registry as rows ready for the sources table"""
    rows = []

    for source in DOMESTIC_RSS_SOURCES:
        rows.append({
            **source,
            "region": "domestic",
            "fetch_kind": "feed",
            "family": "news",
            "category": "tech",
            "keyword_filter": True,
            "extract_body": False,
        })

    for source in INTERNATIONAL_RSS_SOURCES:
        rows.append({
            **source,
            "region": "international",
            "fetch_kind": "feed",
            "family": "news",
            "category": "tech",
            "keyword_filter": True,
            "extract_body": True,
        })

    for source in AI_COMPANY_SOURCES:
        rows.append({
            **source,
            "region": "international",
            "family": "news",
            "category": "manufacturer",
            "keyword_filter": False,
            "extract_body": True,
        })

    rows.append({
        "name": "Known AI conferences",
        "endpoint": KNOWN_EVENTS_ENDPOINT,
        "region": "domestic",
        "fetch_kind": "static-api",
        "family": "events_known",
        "category": "event",
        "keyword_filter": False,
        "extract_body": False,
    })

    for source in EVENT_API_SOURCES:
        rows.append({
            **source,
            "fetch_kind": "static-api",
            "family": "events_api",
            "category": "event",
            "keyword_filter": False,
            "extract_body": False,
        })

    for source in EVENT_LISTING_SOURCES:
        rows.append({
            **source,
            "fetch_kind": "scrape",
            "family": "events_api",
            "category": "event",
            "keyword_filter": True,
            "extract_body": False,
        })

    return rows
