"""
Full-text extraction for article pages

Feeds usually carry only a teaser, so article bodies are pulled from the
page itself. The result is plain text, bounded in length to keep
translation cost predictable.
"""

import logging
import re
import time
from typing import Dict, List, Optional

import requests
import trafilatura
from bs4 import BeautifulSoup

from ainews.config import settings
from ainews.errors import ExtractionFailed
from ainews.utils.url_utils import is_fetchable

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

# Class-name fragments of common article containers, tried in order
CONTENT_CLASS_HINTS = ("article", "content", "post")


def _has_class_hint(hint: str):
    def match(classes) -> bool:
        if not classes:
            return False
        if isinstance(classes, str):
            classes = classes.split()
        return any(hint in cls.lower() for cls in classes)
    return match


def _clean(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def _locate_article_text(html: str) -> str:
    """
    Find the article region of a page and return its text.

    Order: <article>, div containers with article/content/post classes,
    <main>, trafilatura's main-content detection, then the whole body.
    """
    soup = BeautifulSoup(html, 'html.parser')

    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    region = soup.find("article")

    if region is None:
        for hint in CONTENT_CLASS_HINTS:
            region = soup.find("div", class_=_has_class_hint(hint))
            if region is not None:
                break

    if region is None:
        region = soup.find("main")

    if region is not None:
        return _clean(region.get_text(separator=" "))

    detected = trafilatura.extract(html, include_comments=False, include_tables=False)
    if detected:
        return _clean(detected)

    body = soup.body or soup
    return _clean(body.get_text(separator=" "))


def extract_text_from_html(html: str) -> str:
    """
    Apply the extraction policy to an HTML document.

    Raises:
        ExtractionFailed: less than EXTRACT_MIN_CHARS of usable text
    """
    content = _locate_article_text(html or "")

    if len(content) < settings.EXTRACT_MIN_CHARS:
        raise ExtractionFailed(f"content too short ({len(content)} chars)")

    if len(content) > settings.EXTRACT_MAX_CHARS:
        content = content[:settings.EXTRACT_MAX_CHARS] + "..."

    return content


def fetch_html(url: str) -> str:
    """
    Download a page.

    Raises:
        ExtractionFailed: non-http(s) URL, network or HTTP error
    """
    if not is_fetchable(url):
        raise ExtractionFailed(f"refusing to fetch {url!r}")

    try:
        response = requests.get(
            url,
            headers={
                'User-Agent': settings.USER_AGENT,
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
                'Accept-Language': 'en-US,en;q=0.5',
            },
            timeout=settings.EXTRACT_TIMEOUT_SECONDS
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise ExtractionFailed(str(e)) from e

    return response.text


def extract_article_content(url: str) -> str:
    """
    Extract the article body behind a URL.

    Returns:
        Plain text, at most EXTRACT_MAX_CHARS (+ "..."), or "" when nothing
        usable was found. Callers fall back to the feed summary.
    """
    try:
        logger.info(f"Extracting content from: {url}")
        content = extract_text_from_html(fetch_html(url))
        logger.info(f"Extracted {len(content)} chars from {url}")
        return content
    except ExtractionFailed as e:
        logger.warning(f"No usable content from {url}: {e}")
        return ""


def extract_multiple_articles(urls: List[str], delay: Optional[float] = 1.0) -> Dict[str, str]:
    """Extract several pages one after another, pausing between requests"""
    results = {}

    for index, url in enumerate(urls):
        results[url] = extract_article_content(url)
        if delay and index < len(urls) - 1:
            time.sleep(delay)

    return results
