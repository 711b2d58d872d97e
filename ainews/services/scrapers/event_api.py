"""
Structured event API adapter

Conference and community sites expose loosely similar JSON. Field names
differ per provider, so each attribute is looked up under every alias seen
in the wild.
"""

import logging
from typing import Dict, List, Optional

import requests

from ainews.config import settings
from ainews.config.sources import KNOWN_EVENTS_ENDPOINT
from ainews.errors import SourceUnavailable
from ainews.utils.text import parse_datetime, strip_html
from .base import RawEvent, SourceDescriptor
from .known_events import fetch_known_events

logger = logging.getLogger(__name__)

NAME_KEYS = ("title", "name", "eventName")
DESCRIPTION_KEYS = ("description", "summary", "content")
START_KEYS = ("startDate", "start_date", "startTime", "start_time")
END_KEYS = ("endDate", "end_date", "endTime", "end_time")
LOCATION_KEYS = ("location", "venue", "city")
REGISTRATION_KEYS = ("registrationUrl", "registerUrl", "ticketUrl", "url")
ATTENDEE_KEYS = ("expectedAttendees", "attendees", "capacity")
AGENDA_KEYS = ("agenda", "schedule")


def _first(item: Dict, keys) -> Optional[object]:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def _speakers(value) -> Optional[str]:
    if not value:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        names = []
        for speaker in value:
            if isinstance(speaker, dict):
                speaker = speaker.get("name")
            if speaker:
                names.append(str(speaker))
        return ", ".join(names) or None
    return str(value)


def _event_type(item: Dict) -> Optional[str]:
    if item.get("isOnline") is True or item.get("format") == "online":
        return "online"
    if item.get("isOnline") is False or item.get("format") == "offline":
        return "offline"
    return None


def _attendees(value) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_event_payload(payload, source: SourceDescriptor) -> List[RawEvent]:
    """Map an API response ({"data": [...]} or a bare list) to RawEvents"""
    if isinstance(payload, dict):
        items = payload.get("data") or payload.get("events") or []
    elif isinstance(payload, list):
        items = payload
    else:
        items = []

    if not isinstance(items, list):
        raise SourceUnavailable(source.name, "unexpected payload shape")

    events = []
    for item in items:
        if not isinstance(item, dict):
            continue

        name = _first(item, NAME_KEYS)
        start = parse_datetime(_first(item, START_KEYS))

        if not name or start is None:
            logger.debug(f"  {source.name}: skipping item without name/start date")
            continue

        region = item.get("region")
        if region not in ("domestic", "international"):
            region = None

        registration = _first(item, REGISTRATION_KEYS)

        events.append(RawEvent(
            source_name=source.name,
            name=strip_html(str(name)),
            description=strip_html(str(_first(item, DESCRIPTION_KEYS) or "")),
            start_date=start,
            end_date=parse_datetime(_first(item, END_KEYS)),
            location=_first(item, LOCATION_KEYS),
            event_type=_event_type(item),
            region=region,
            link=item.get("url") or registration,
            registration_url=registration,
            speakers=_speakers(item.get("speakers")),
            agenda=_first(item, AGENDA_KEYS),
            expected_attendees=_attendees(_first(item, ATTENDEE_KEYS))
        ))

    return events


def fetch_events(source: SourceDescriptor) -> List[RawEvent]:
    """
    Fetch events from a static-api source.

    Raises:
        SourceUnavailable: network error, HTTP error or non-JSON body
    """
    if source.endpoint == KNOWN_EVENTS_ENDPOINT:
        return fetch_known_events(source)

    logger.info(f"📅 Fetching events from {source.name}...")

    try:
        response = requests.get(
            source.endpoint,
            headers={'User-Agent': settings.USER_AGENT, 'Accept': 'application/json'},
            timeout=settings.FETCH_TIMEOUT_SECONDS
        )
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as e:
        raise SourceUnavailable(source.name, str(e)) from e
    except ValueError as e:
        raise SourceUnavailable(source.name, f"invalid JSON: {e}") from e

    events = parse_event_payload(payload, source)
    logger.info(f"  {source.name}: {len(events)} events")
    return events
