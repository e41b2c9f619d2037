from __future__ import annotations

import logging
import os
import time
from datetime import datetime, timezone
from functools import partial
from typing import Callable, Optional

from dotenv import load_dotenv

from .config import AppConfig, load_config
from .errors import UsosRpcError
from .feed import CalendarFeed
from .fetch import fetch_content
from .presence import ConsolePresenter, Presenter, create_presence
from .selector import SelectionKind, select_event

CONFIG_PATH_DEFAULT = "~/.config/usos-rpc/config.yaml"

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _format_local(when: datetime) -> str:
    return when.astimezone().strftime("%Y-%m-%d %H:%M")


def _refresh_feed(feed: CalendarFeed) -> None:
    print("Refreshing calendar data...")
    try:
        if feed.refresh():
            print(f"Calendar data has been refreshed successfully: {feed.calendar.name}")
        else:
            print("Nothing has changed in the calendar since the last check.")
    except UsosRpcError as e:
        # Keep serving the previous snapshot.
        print(f"Calendar refresh failed! {e.message}")


def update_presence(
    feed: CalendarFeed,
    presenter: Presenter,
    cfg: AppConfig,
    now: datetime,
    refresh: bool = True,
) -> datetime:
    """Run one refresh/select/emit step and return when the next one is due."""
    if refresh:
        _refresh_feed(feed)

    selection = select_event(feed.calendar, now, cfg.idle_refresh_rate)
    presenter.emit(create_presence(selection, cfg.image_key))

    event = selection.event
    if event is None:
        print("No upcoming events were found!")
    elif selection.kind is SelectionKind.IN_PROGRESS:
        print(f"Current event: {event.display_subject}")
    else:
        print(f"Next event: {event.display_subject} at {_format_local(feed.calendar.start_of(event))}")

    print(f"Next update at {_format_local(selection.next_check)}")
    return selection.next_check


def run(
    cfg: AppConfig,
    presenter: Optional[Presenter] = None,
    clock: Clock = _utc_now,
    sleep: Callable[[float], None] = time.sleep,
    max_updates: Optional[int] = None,
) -> None:
    presenter = presenter or ConsolePresenter()
    feed = CalendarFeed(cfg.calendar, fetcher=partial(fetch_content, timeout=cfg.request_timeout_seconds))

    # The first load has no previous calendar to fall back to; errors propagate.
    print(f"Reading calendar from {cfg.calendar}...")
    feed.refresh()
    print(f"Loaded calendar {feed.calendar.name!r} with {len(feed.calendar)} events")

    next_update = clock()
    updates = 0
    while max_updates is None or updates < max_updates:
        now = clock()
        if next_update > now:
            sleep((next_update - now).total_seconds())
            continue
        next_update = update_presence(feed, presenter, cfg, now, refresh=updates > 0)
        updates += 1


def main() -> int:
    import argparse

    load_dotenv()
    ap = argparse.ArgumentParser(description="Show the current USOS timetable event as a presence.")
    ap.add_argument("--config", default=os.environ.get("USOS_RPC_CONFIG", CONFIG_PATH_DEFAULT))
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config)
        run(cfg)
    except UsosRpcError as e:
        print(f"Error: {e.message}")
        return 1
    except KeyboardInterrupt:
        print("Rich presence has been stopped.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
