from __future__ import annotations
from bisect import bisect_left
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Tuple, Union
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class NoLocation:
    pass


@dataclass(frozen=True)
class Address:
    address: str


@dataclass(frozen=True)
class FullLocation:
    room: str
    building: str
    address: str


Location = Union[NoLocation, Address, FullLocation]


@dataclass(frozen=True, eq=False)
class Event:
    uid: str
    subject: str
    start: datetime             # naive, local to the owning calendar
    end: datetime               # naive, local to the owning calendar
    type: Optional[str] = None  # e.g. "WYK", "LAB"
    url: Optional[str] = None
    location: Location = field(default_factory=NoLocation)

    @property
    def sort_key(self) -> Tuple[datetime, datetime, str]:
        return (self.start, self.end, self.uid)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self) -> int:
        return hash(self.uid)

    def __lt__(self, other: Event) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __le__(self, other: Event) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.sort_key <= other.sort_key

    def __gt__(self, other: Event) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.sort_key > other.sort_key

    def __ge__(self, other: Event) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.sort_key >= other.sort_key

    def start_in(self, tz: ZoneInfo) -> datetime:
        return self.start.replace(tzinfo=tz)

    def end_in(self, tz: ZoneInfo) -> datetime:
        return self.end.replace(tzinfo=tz)

    @property
    def display_subject(self) -> str:
        if self.type is None:
            return self.subject
        return f"{self.subject} - {self.type}"

    @property
    def has_full_location(self) -> bool:
        return isinstance(self.location, FullLocation)


class Calendar:
    """A parsed feed snapshot.

    Events are kept sorted by ``Event.sort_key``. Adding an event whose
    (start, end, uid) key is already present is a no-op.
    """

    def __init__(self, name: str, product_id: str, time_zone: ZoneInfo, events: Iterable[Event] = ()) -> None:
        self.name = name
        self.product_id = product_id
        self.time_zone = time_zone
        self._events: List[Event] = []
        self._keys: List[Tuple[datetime, datetime, str]] = []
        for event in events:
            self.add_event(event)

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def add_event(self, event: Event) -> bool:
        key = event.sort_key
        idx = bisect_left(self._keys, key)
        if idx < len(self._keys) and self._keys[idx] == key:
            return False
        self._keys.insert(idx, key)
        self._events.insert(idx, event)
        return True

    def replace_events(self, events: Iterable[Event]) -> None:
        self._events = []
        self._keys = []
        for event in events:
            self.add_event(event)

    def start_of(self, event: Event) -> datetime:
        return event.start_in(self.time_zone)

    def end_of(self, event: Event) -> datetime:
        return event.end_in(self.time_zone)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __repr__(self) -> str:
        return f"Calendar(name={self.name!r}, time_zone={self.time_zone.key!r}, events={len(self._events)})"
