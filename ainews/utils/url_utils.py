"""URL canonicalization helpers for ingestion/dedup."""

import hashlib
from typing import Iterable, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse


DEFAULT_STRIP_QUERY_PARAMS = {
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    "utm_id",
    "utm_name",
    "gclid",
    "fbclid",
    "mc_cid",
    "mc_eid",
    "ref",
    "ref_src",
}


def canonicalize_url(url: str, strip_params: Optional[Iterable[str]] = None) -> str:
    """
    Canonicalize a URL for duplicate detection.

    - Lowercase scheme + hostname
    - Remove fragments and trailing slashes on non-root paths
    - Strip common tracking query parameters, sort the rest
    """
    if not url:
        return ""
    strip = set(strip_params) if strip_params is not None else DEFAULT_STRIP_QUERY_PARAMS
    p = urlparse(url.strip())
    scheme = (p.scheme or "https").lower()
    netloc = (p.netloc or "").lower()
    path = p.path or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"

    kept = [(k, v) for k, v in parse_qsl(p.query, keep_blank_values=True) if k.lower() not in strip]
    kept.sort(key=lambda kv: (kv[0].lower(), kv[1]))
    query = urlencode(kept, doseq=True)

    return urlunparse((scheme, netloc, path, "", query, ""))


def url_hash(url: str) -> str:
    """Stable SHA-256 hex digest of the canonicalized URL (64 chars)"""
    return hashlib.sha256(canonicalize_url(url).encode("utf-8")).hexdigest()


def absolutize(url: str, base: str) -> str:
    """Resolve a possibly relative link against the page it was found on"""
    if not url:
        return ""
    return urljoin(base, url.strip())


def is_fetchable(url: str) -> bool:
    """Only absolute http(s) URLs are ever downloaded"""
    try:
        p = urlparse(url or "")
    except ValueError:
        return False
    return p.scheme in ("http", "https") and bool(p.netloc)
