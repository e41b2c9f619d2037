"""Parser for the subset of iCalendar that USOS timetable feeds use.

Only VCALENDAR/VEVENT framing and the properties PRODID, X-WR-CALNAME,
X-WR-TIMEZONE, SUMMARY, DTSTART, DTEND, UID, DESCRIPTION and LOCATION are
read. Everything else in the feed is ignored.
"""
from __future__ import annotations
from datetime import datetime
import logging
import re
from typing import List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import (
    FramingError,
    MetadataError,
    MissingPropertyError,
    NoEventsError,
    RecordError,
    TimestampError,
    TimeZoneError,
)
from .models import Address, Calendar, Event, FullLocation, Location, NoLocation

logger = logging.getLogger(__name__)

BEGIN_CALENDAR = "BEGIN:VCALENDAR"
END_CALENDAR = "END:VCALENDAR"
BEGIN_EVENT = "BEGIN:VEVENT"
END_EVENT = "END:VEVENT"

SUMMARY_SEPARATOR = " - "
ROOM_SEPARATOR = ": "

_TIMESTAMP = re.compile(r"(?:VALUE=DATE-TIME:)?(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})Z?")


def unescape(line: str) -> str:
    return line.replace("\\n", "\n").replace("\\,", ",")


def preprocess(text: str) -> List[str]:
    """Split feed text into logical property lines.

    Folded continuation lines (starting with a space) are joined onto the
    previous line, blank lines are dropped and escapes are resolved.
    """
    lines: List[str] = []
    # Only \n (and \r\n, via strip) ends a line; other Unicode separators stay in the value.
    for raw in text.split("\n"):
        current = raw.strip()
        if not current:
            continue
        if raw.startswith(" ") and lines:
            lines[-1] += current
        else:
            lines.append(current)
    return [unescape(line) for line in lines]


def _value_separator(params: str) -> int:
    """Index of the colon ending the parameter list, ignoring colons inside quotes."""
    quoted = False
    for idx, ch in enumerate(params):
        if ch == '"':
            quoted = not quoted
        elif ch == ":" and not quoted:
            return idx
    return -1


def find_property(lines: Sequence[str], name: str, begin: int = 0, end: Optional[int] = None) -> Optional[str]:
    if end is None:
        end = len(lines)
    for line in lines[begin:end]:
        if not line.startswith(name):
            continue
        rest = line[len(name):]
        if rest.startswith(":"):
            return rest[1:]
        if rest.startswith(";"):
            colon = _value_separator(rest)
            if colon != -1:
                return rest[colon + 1:]
    return None


def get_property(lines: Sequence[str], name: str, begin: int = 0, end: Optional[int] = None) -> str:
    value = find_property(lines, name, begin, end)
    if value is None:
        raise MissingPropertyError(name)
    return value


def split_summary(summary: str) -> Tuple[str, Optional[str]]:
    """Return (subject, type) for a summary like ``"WYK - Algorithms"``."""
    parts = summary.split(SUMMARY_SEPARATOR)
    if len(parts) == 2:
        return parts[1], parts[0]
    if len(parts) == 1:
        return parts[0], None
    return summary, None


def parse_timestamp(value: str) -> datetime:
    m = _TIMESTAMP.fullmatch(value.strip())
    if not m:
        raise TimestampError(value)
    try:
        return datetime(*(int(g) for g in m.groups()))
    except ValueError as e:
        raise TimestampError(value) from e


def classify_location(description: str, location: Optional[str]) -> Tuple[Location, Optional[str]]:
    """Return (location, url) derived from DESCRIPTION and LOCATION.

    USOS descriptions are usually "Room: X", building, event URL; anything
    else falls back to the bare address.
    """
    if location is None:
        return NoLocation(), None

    parts = [p for p in description.split("\n") if p]
    if len(parts) != 3:
        return Address(location), None

    room_parts = parts[0].split(ROOM_SEPARATOR)
    room = room_parts[1] if len(room_parts) == 2 else parts[0]
    return FullLocation(room=room, building=parts[1], address=location), parts[2]


def build_event(
    summary: str,
    dtstart: str,
    dtend: str,
    uid: str,
    description: str,
    location: Optional[str] = None,
) -> Event:
    subject, event_type = split_summary(summary)
    start = parse_timestamp(dtstart)
    end = parse_timestamp(dtend)
    loc, url = classify_location(description, location)
    return Event(
        uid=uid,
        subject=subject,
        type=event_type,
        start=start,
        end=end,
        url=url,
        location=loc,
    )


def parse_event(lines: Sequence[str], begin: int, end: int) -> Event:
    return build_event(
        summary=get_property(lines, "SUMMARY", begin, end),
        dtstart=get_property(lines, "DTSTART", begin, end),
        dtend=get_property(lines, "DTEND", begin, end),
        uid=get_property(lines, "UID", begin, end),
        description=get_property(lines, "DESCRIPTION", begin, end),
        location=find_property(lines, "LOCATION", begin, end),
    )


def _find_event_end(lines: Sequence[str], begin: int, stop: int) -> int:
    for idx in range(begin, stop):
        if lines[idx] == END_EVENT:
            return idx
    return stop


def _collect_events(lines: Sequence[str]) -> Tuple[List[Event], int]:
    events: List[Event] = []
    attempted = 0
    idx = 1
    stop = len(lines) - 1
    while idx < stop:
        if not lines[idx].startswith(BEGIN_EVENT):
            idx += 1
            continue

        end = _find_event_end(lines, idx, stop)
        attempted += 1
        try:
            if end == stop:
                raise RecordError(f"{BEGIN_EVENT} at line {idx} has no matching {END_EVENT}")
            events.append(parse_event(lines, idx, end))
        except RecordError as e:
            logger.warning("Skipping event record at line %d: %s", idx, e)
        idx = end + 1
    return events, attempted


def resolve_time_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise TimeZoneError(name) from e


def _calendar_property(lines: Sequence[str], name: str) -> str:
    value = find_property(lines, name)
    if value is None:
        raise MetadataError(f"Missing calendar property: {name}")
    return value


def parse_calendar(text: str) -> Calendar:
    lines = preprocess(text)
    if not lines or not lines[0].startswith(BEGIN_CALENDAR) or not lines[-1].startswith(END_CALENDAR):
        raise FramingError("Invalid iCalendar file!")

    events, attempted = _collect_events(lines)
    if attempted and not events:
        raise NoEventsError(attempted)

    product_id = _calendar_property(lines, "PRODID")
    name = _calendar_property(lines, "X-WR-CALNAME")
    tz = resolve_time_zone(_calendar_property(lines, "X-WR-TIMEZONE"))

    calendar = Calendar(name=name, product_id=product_id, time_zone=tz, events=events)
    logger.debug("Parsed calendar %r: %d of %d records usable", name, len(calendar), attempted)
    return calendar
