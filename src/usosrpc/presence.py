from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Protocol

from .models import Address, Event, FullLocation, NoLocation
from .selector import Selection, SelectionKind


@dataclass(frozen=True)
class Presence:
    details: str                # "Algorithms - WYK"
    state: Optional[str]        # "101 - Building A" when the room is known
    start_timestamp: int        # epoch seconds
    end_timestamp: int          # epoch seconds
    large_image_key: Optional[str] = None


class Presenter(Protocol):
    def emit(self, presence: Optional[Presence]) -> None:
        ...


def _location_text(event: Event) -> Optional[str]:
    loc = event.location
    if isinstance(loc, FullLocation):
        return f"{loc.room} - {loc.building}"
    if isinstance(loc, (Address, NoLocation)):
        return None
    raise TypeError(f"Unknown location variant: {loc!r}")


def create_presence(selection: Selection, image_key: Optional[str] = None) -> Optional[Presence]:
    """Only an event that is already running is shown; anything else clears the presence."""
    if selection.kind is not SelectionKind.IN_PROGRESS:
        return None
    event, start, end = selection.event, selection.start, selection.end
    if event is None or start is None or end is None:
        raise ValueError("An in-progress selection must carry its event and times")

    return Presence(
        details=event.display_subject,
        state=_location_text(event),
        start_timestamp=int(start.timestamp()),
        end_timestamp=int(end.timestamp()),
        large_image_key=image_key,
    )


class ConsolePresenter:
    """Prints presence changes to stdout instead of talking to a status API."""

    def __init__(self) -> None:
        self.current: Optional[Presence] = None

    def emit(self, presence: Optional[Presence]) -> None:
        if presence == self.current:
            return
        self.current = presence
        if presence is None:
            print("Presence cleared")
            return
        line = f"Presence: {presence.details}"
        if presence.state:
            line += f" ({presence.state})"
        print(line)
