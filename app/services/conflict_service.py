# app/services/conflict_service.py
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from app.models.calendar_event import CalendarEvent


def intervals_overlap(
    start1: datetime, end1: datetime, start2: datetime, end2: datetime
) -> bool:
    """Half-open overlap: back-to-back intervals do not overlap."""
    return start1 < end2 and start2 < end1


def expand(
    start: datetime, end: datetime, buffer_minutes: Optional[int]
) -> Tuple[datetime, datetime]:
    pad = timedelta(minutes=buffer_minutes or 0)
    return start - pad, end + pad


def find_conflicts(
    events: Iterable[CalendarEvent],
    start: datetime,
    end: datetime,
    buffer_minutes: Optional[int] = None,
) -> List[CalendarEvent]:
    """
    Events overlapping [start, end], widened by `buffer_minutes` on each side
    when given. Input order is kept.
    """
    lo, hi = expand(start, end, buffer_minutes)
    return [
        event
        for event in events
        if intervals_overlap(lo, hi, event.start_time, event.end_time)
    ]


def get_conflicts(
    store,
    user_id: int,
    start: datetime,
    end: datetime,
    buffer_minutes: Optional[int] = None,
) -> List[CalendarEvent]:
    lo, hi = expand(start, end, buffer_minutes)
    events = store.get_user_calendar_events(user_id, lo, hi)
    return find_conflicts(events, start, end, buffer_minutes)
