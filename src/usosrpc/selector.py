from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from .models import Calendar, Event


class SelectionKind(Enum):
    NONE = "none"
    IN_PROGRESS = "in_progress"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class Selection:
    kind: SelectionKind
    next_check: datetime
    event: Optional[Event] = None
    start: Optional[datetime] = None   # zone-resolved
    end: Optional[datetime] = None     # zone-resolved


def prune_expired(calendar: Calendar, now: datetime) -> List[Event]:
    """Drop events that ended before ``now`` from the calendar and return them."""
    expired: List[Event] = []
    retained: List[Event] = []
    for event in calendar:
        if calendar.end_of(event) < now:
            expired.append(event)
        else:
            retained.append(event)
    if expired:
        calendar.replace_events(retained)
    return expired


def select_event(calendar: Calendar, now: datetime, interval: timedelta) -> Selection:
    """Pick the in-progress or next upcoming event and when to look again.

    Past events are pruned from ``calendar`` as a side effect. The next check
    is never further away than ``interval``.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    prune_expired(calendar, now)
    candidate = next(iter(calendar), None)
    if candidate is None:
        return Selection(kind=SelectionKind.NONE, next_check=now + interval)

    start = calendar.start_of(candidate)
    end = calendar.end_of(candidate)
    if start <= now:
        return Selection(
            kind=SelectionKind.IN_PROGRESS,
            next_check=now + min(interval, end - now),
            event=candidate,
            start=start,
            end=end,
        )
    return Selection(
        kind=SelectionKind.UPCOMING,
        next_check=now + min(interval, start - now),
        event=candidate,
        start=start,
        end=end,
    )
