from datetime import datetime
from zoneinfo import ZoneInfo

from usosrpc.models import Address, Calendar, Event, FullLocation

TZ = ZoneInfo("Europe/Warsaw")


def _event(uid: str, hour: int, end_hour: int | None = None, **kwargs) -> Event:
    return Event(
        uid=uid,
        subject=kwargs.pop("subject", "Algorithms"),
        start=datetime(2024, 1, 15, hour, 0),
        end=datetime(2024, 1, 15, end_hour if end_hour is not None else hour + 1, 0),
        **kwargs,
    )


def test_events_are_equal_by_uid_only():
    assert _event("a", 8) == _event("a", 10, subject="Other")
    assert _event("a", 8) != _event("b", 8)
    assert len({_event("a", 8), _event("a", 10)}) == 1


def test_events_order_by_start_then_end_then_uid():
    events = [_event("c", 9), _event("b", 8, 10), _event("z", 8, 9), _event("a", 8, 9)]

    assert [e.uid for e in sorted(events)] == ["a", "z", "b", "c"]


def test_calendar_insert_of_identical_key_is_a_noop():
    first = _event("a", 8, location=Address("Main St 1"))
    duplicate = _event("a", 8, location=Address("Elsewhere"))
    cal = Calendar(name="Plan", product_id="x", time_zone=TZ)

    assert cal.add_event(first) is True
    assert cal.add_event(duplicate) is False
    assert cal.events[0].location == Address("Main St 1")


def test_calendar_keeps_same_uid_with_different_times():
    cal = Calendar(name="Plan", product_id="x", time_zone=TZ, events=[_event("a", 10), _event("a", 8)])

    assert [e.start.hour for e in cal.events] == [8, 10]


def test_zone_resolved_instants():
    cal = Calendar(name="Plan", product_id="x", time_zone=TZ)
    event = _event("a", 8)

    assert cal.start_of(event) == datetime(2024, 1, 15, 7, 0, tzinfo=ZoneInfo("UTC"))
    assert cal.end_of(event).tzinfo is TZ


def test_display_subject_and_full_location_flag():
    typed = _event("a", 8, type="LAB", location=FullLocation(room="101", building="A", address="Main St 1"))
    plain = _event("b", 8)

    assert typed.display_subject == "Algorithms - LAB"
    assert typed.has_full_location
    assert plain.display_subject == "Algorithms"
    assert not plain.has_full_location


def test_same_uid_events_compare_consistently_by_time():
    later = _event("a", 10)
    earlier = _event("a", 8)

    assert later > earlier
    assert later >= earlier
    assert not later <= earlier
    assert not later < earlier
    assert earlier <= later
    assert not earlier >= later
