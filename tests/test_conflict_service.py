# tests/test_conflict_service.py
from datetime import datetime

from app.models.calendar_event import CalendarEvent
from app.services.conflict_service import (
    find_conflicts,
    get_conflicts,
    intervals_overlap,
)


def _at(h: int, m: int = 0) -> datetime:
    return datetime(2025, 1, 6, h, m)


def _event(event_id: int, start: datetime, end: datetime) -> CalendarEvent:
    return CalendarEvent(
        id=event_id, user_id=1, title=f"Event {event_id}", start_time=start, end_time=end
    )


def test_intervals_overlap():
    assert intervals_overlap(_at(9), _at(10), _at(9, 30), _at(10, 30))
    assert intervals_overlap(_at(9), _at(12), _at(10), _at(11))  # containment
    assert intervals_overlap(_at(10), _at(11), _at(9), _at(12))

    # back-to-back is not an overlap
    assert not intervals_overlap(_at(9), _at(10), _at(10), _at(11))
    assert not intervals_overlap(_at(10), _at(11), _at(9), _at(10))


def test_find_conflicts_without_buffer():
    standup = _event(1, _at(10), _at(10, 30))

    assert find_conflicts([standup], _at(10, 30), _at(11)) == []
    assert find_conflicts([standup], _at(10, 15), _at(10, 45)) == [standup]


def test_buffer_widens_the_checked_interval():
    standup = _event(1, _at(10), _at(10, 30))

    assert find_conflicts([standup], _at(10, 30), _at(11), buffer_minutes=0) == []
    assert find_conflicts([standup], _at(10, 30), _at(11), buffer_minutes=15) == [standup]
    # 15 min buffer before 10:45 ends exactly at 10:30
    assert find_conflicts([standup], _at(10, 45), _at(11, 15), buffer_minutes=15) == []


def test_find_conflicts_keeps_input_order():
    late = _event(2, _at(11), _at(12))
    early = _event(1, _at(9), _at(10))

    assert find_conflicts([late, early], _at(8), _at(13)) == [late, early]


def test_get_conflicts_queries_buffered_window():
    standup = _event(1, _at(10), _at(10, 30))

    class Store:
        def __init__(self):
            self.queries = []

        def get_user_calendar_events(self, user_id, start, end):
            self.queries.append((user_id, start, end))
            return [standup]

    store = Store()
    assert get_conflicts(store, 7, _at(10, 30), _at(11), buffer_minutes=10) == [standup]
    assert store.queries == [(7, _at(10, 20), _at(11, 10))]

    assert get_conflicts(store, 7, _at(10, 30), _at(11)) == []
