"""
Runtime configuration

Everything is read from the environment (a local .env is loaded first).
Intervals, limits and thresholds for the ingestion and translation pipeline
live here so the scheduler, fetchers and orchestrator agree on them.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL")
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")

# Scheduling (each family has its own job)
SCHEDULER_ENABLED = _bool("SCHEDULER_ENABLED", True)
NEWS_INTERVAL_MINUTES = _int("NEWS_INTERVAL_MINUTES", 10)
TRANSLATION_INTERVAL_MINUTES = _int("TRANSLATION_INTERVAL_MINUTES", 5)
TRANSLATION_RETRY_INTERVAL_MINUTES = _int("TRANSLATION_RETRY_INTERVAL_MINUTES", 60)
EVENTS_KNOWN_INTERVAL_HOURS = _int("EVENTS_KNOWN_INTERVAL_HOURS", 24)
EVENTS_API_INTERVAL_HOURS = _int("EVENTS_API_INTERVAL_HOURS", 6)

# Fetching
USER_AGENT = os.getenv(
    "CRAWLER_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
)
FETCH_TIMEOUT_SECONDS = _int("FETCH_TIMEOUT_SECONDS", 10)
FETCH_CONCURRENCY = _int("FETCH_CONCURRENCY", 8)
ITEMS_PER_SOURCE = _int("ITEMS_PER_SOURCE", 10)

# Content extraction
EXTRACT_FULL_CONTENT = _bool("EXTRACT_FULL_CONTENT", True)
EXTRACT_TIMEOUT_SECONDS = _int("EXTRACT_TIMEOUT_SECONDS", 15)
EXTRACT_CONCURRENCY = _int("EXTRACT_CONCURRENCY", 4)
EXTRACT_MIN_CHARS = _int("EXTRACT_MIN_CHARS", 100)
EXTRACT_MAX_CHARS = _int("EXTRACT_MAX_CHARS", 3000)

# Normalization
SUMMARY_MAX_CHARS = _int("SUMMARY_MAX_CHARS", 500)

# Translation
TRANSLATION_TARGET_LANGUAGE = os.getenv("TRANSLATION_TARGET_LANGUAGE", "zh")
TRANSLATION_BATCH_SIZE = _int("TRANSLATION_BATCH_SIZE", 20)
TRANSLATION_MAX_RETRIES = _int("TRANSLATION_MAX_RETRIES", 3)
TRANSLATE_FULL_BODY = _bool("TRANSLATE_FULL_BODY", True)
TRANSLATION_DELAY_SECONDS = float(os.getenv("TRANSLATION_DELAY_SECONDS", "0"))

# Excerpts (LLM digests for items with thin feed text)
EXCERPTS_ENABLED = _bool("EXCERPTS_ENABLED", True)
EXCERPT_INTERVAL_MINUTES = _int("EXCERPT_INTERVAL_MINUTES", 30)
EXCERPT_BATCH_SIZE = _int("EXCERPT_BATCH_SIZE", 10)
EXCERPT_THIN_SUMMARY_CHARS = _int("EXCERPT_THIN_SUMMARY_CHARS", 200)
EXCERPT_MAX_CHARS = _int("EXCERPT_MAX_CHARS", 2000)
EXCERPT_FALLBACK_CHARS = _int("EXCERPT_FALLBACK_CHARS", 500)
