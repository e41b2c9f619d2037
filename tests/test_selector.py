from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from usosrpc.models import Calendar, Event
from usosrpc.selector import SelectionKind, prune_expired, select_event

TZ = ZoneInfo("Europe/Warsaw")
IDLE = timedelta(minutes=30)
NOW = datetime(2024, 1, 15, 12, 0, tzinfo=TZ)


def _event(uid: str, start_offset: timedelta, end_offset: timedelta) -> Event:
    base = NOW.replace(tzinfo=None)
    return Event(uid=uid, subject="Algorithms", type="WYK", start=base + start_offset, end=base + end_offset)


def _calendar(*events: Event) -> Calendar:
    return Calendar(name="Plan", product_id="-//USOS//PL", time_zone=TZ, events=events)


def test_only_event_ended_an_hour_ago_is_pruned_and_nothing_is_upcoming():
    cal = _calendar(_event("old", timedelta(hours=-2), timedelta(hours=-1)))

    selection = select_event(cal, NOW, IDLE)

    assert selection.kind is SelectionKind.NONE
    assert selection.event is None
    assert selection.next_check == NOW + IDLE
    assert len(cal) == 0


def test_upcoming_event_waits_for_the_nearer_of_interval_and_start():
    cal = _calendar(_event("next", timedelta(minutes=10), timedelta(minutes=70)))

    selection = select_event(cal, NOW, IDLE)

    assert selection.kind is SelectionKind.UPCOMING
    assert selection.event.uid == "next"
    assert selection.next_check == NOW + timedelta(minutes=10)
    assert selection.start == NOW + timedelta(minutes=10)
    assert selection.end == NOW + timedelta(minutes=70)


def test_far_upcoming_event_is_capped_by_interval():
    cal = _calendar(_event("later", timedelta(hours=5), timedelta(hours=6)))

    selection = select_event(cal, NOW, IDLE)

    assert selection.kind is SelectionKind.UPCOMING
    assert selection.next_check == NOW + IDLE


def test_in_progress_event_waits_for_the_nearer_of_interval_and_end():
    cal = _calendar(_event("now", timedelta(minutes=-30), timedelta(minutes=15)))

    selection = select_event(cal, NOW, IDLE)

    assert selection.kind is SelectionKind.IN_PROGRESS
    assert selection.event.uid == "now"
    assert selection.next_check == NOW + timedelta(minutes=15)


def test_event_starting_exactly_now_is_in_progress():
    cal = _calendar(_event("now", timedelta(0), timedelta(hours=2)))

    selection = select_event(cal, NOW, IDLE)

    assert selection.kind is SelectionKind.IN_PROGRESS
    assert selection.next_check == NOW + IDLE


def test_prune_keeps_current_and_future_events_in_order():
    past = _event("past", timedelta(hours=-3), timedelta(hours=-2))
    current = _event("current", timedelta(minutes=-10), timedelta(minutes=50))
    future = _event("future", timedelta(hours=1), timedelta(hours=2))
    cal = _calendar(future, past, current)

    expired = prune_expired(cal, NOW)

    assert [e.uid for e in expired] == ["past"]
    assert [e.uid for e in cal.events] == ["current", "future"]


def test_now_in_another_zone_is_compared_as_an_instant():
    cal = _calendar(_event("next", timedelta(minutes=10), timedelta(minutes=70)))
    utc_now = NOW.astimezone(ZoneInfo("UTC"))

    selection = select_event(cal, utc_now, IDLE)

    assert selection.kind is SelectionKind.UPCOMING
    assert selection.next_check == utc_now + timedelta(minutes=10)


def test_naive_now_is_rejected():
    with pytest.raises(ValueError):
        select_event(_calendar(), NOW.replace(tzinfo=None), IDLE)
