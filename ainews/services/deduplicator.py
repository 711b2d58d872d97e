"""
Duplicate resolution

News: the first source to deliver a link wins; later copies are skipped.
Events: identity is the exact name; a known name is updated in place.
"""

import enum
import logging
from typing import Set

from ainews.services.normalizer import NormalizedEvent, NormalizedItem
from ainews.services.storage import NewsStorage

logger = logging.getLogger(__name__)


class Action(enum.Enum):
    INSERT = "insert"
    SKIP = "skip"
    UPDATE = "update"


class Deduplicator:
    """
    One instance per run. Remembers what the run already accepted so two
    sources carrying the same link in one run produce a single insert.
    """

    def __init__(self, storage: NewsStorage):
        self.storage = storage
        self._seen_links: Set[str] = set()
        self._seen_fingerprints: Set[str] = set()
        self._seen_event_names: Set[str] = set()

    def resolve(self, item: NormalizedItem) -> Action:
        if item.link in self._seen_links or item.content_fingerprint in self._seen_fingerprints:
            return Action.SKIP

        if self.storage.find_news_by_link(item.link) is not None:
            return Action.SKIP

        # Fingerprint only breaks ties between link spellings of the same page
        if self.storage.find_news_by_fingerprint(item.content_fingerprint) is not None:
            return Action.SKIP

        self._seen_links.add(item.link)
        self._seen_fingerprints.add(item.content_fingerprint)
        return Action.INSERT

    def resolve_event(self, event: NormalizedEvent) -> Action:
        if event.name in self._seen_event_names:
            return Action.UPDATE

        self._seen_event_names.add(event.name)
        if self.storage.find_event_by_name(event.name) is not None:
            return Action.UPDATE
        return Action.INSERT
