from __future__ import annotations
import hashlib
import logging
import re
from typing import Callable, Optional

from .errors import CalendarNotLoadedError
from .fetch import fetch_content
from .ical import parse_calendar
from .models import Calendar

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], str]

# DTSTAMP is regenerated on every download, so it must not take part in the fingerprint.
_DTSTAMP = re.compile(r"^DTSTAMP(?:;[^:\r\n]*)?:\d{8}T\d{6}Z?[ \t]*(?:\r?\n|$)", re.MULTILINE)


def normalize_feed(text: str) -> str:
    return _DTSTAMP.sub("", text)


def _digest(normalized: str) -> str:
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def fingerprint(text: str) -> str:
    return _digest(normalize_feed(text))


class CalendarFeed:
    """Keeps the last parsed Calendar together with the fingerprint it came from."""

    def __init__(self, location: str, fetcher: Optional[Fetcher] = None) -> None:
        self.location = location
        self._fetcher = fetcher or fetch_content
        self._calendar: Optional[Calendar] = None
        self._fingerprint = ""

    @property
    def calendar(self) -> Calendar:
        if self._calendar is None:
            raise CalendarNotLoadedError()
        return self._calendar

    @property
    def loaded(self) -> bool:
        return self._calendar is not None

    @property
    def fingerprint(self) -> str:
        return self._fingerprint

    def refresh(self) -> bool:
        """Fetch the feed and rebuild the calendar if its content changed.

        Returns True when a new Calendar was built. Fetch and parse errors
        propagate and leave the previous calendar and fingerprint in place.
        """
        raw = self._fetcher(self.location)
        normalized = normalize_feed(raw)
        new_fingerprint = _digest(normalized)
        if self._calendar is not None and new_fingerprint == self._fingerprint:
            logger.debug("Feed fingerprint unchanged (%s)", new_fingerprint[:12])
            return False

        calendar = parse_calendar(normalized)
        self._calendar, self._fingerprint = calendar, new_fingerprint
        return True
