# app/services/availability_service.py
from datetime import datetime
from typing import Iterable, Optional

from app.models.user_availability import UserAvailability
from app.services.time_utils import to_local

MINUTES_PER_DAY = 24 * 60


def parse_clock(value: str) -> int:
    """
    "HH:mm" -> minutes since local midnight.

    "24:00" is accepted as the end of the day.
    """
    try:
        hours_str, minutes_str = value.split(":")
        hours, minutes = int(hours_str), int(minutes_str)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid HH:mm time: {value!r}") from e

    if not (0 <= minutes < 60) or not (0 <= hours <= 24):
        raise ValueError(f"Invalid HH:mm time: {value!r}")
    total = hours * 60 + minutes
    if total > MINUTES_PER_DAY:
        raise ValueError(f"Invalid HH:mm time: {value!r}")
    return total


def day_of_week(dt: datetime) -> int:
    """0=Sunday ... 6=Saturday (datetime.weekday() is 0=Monday)."""
    return (dt.weekday() + 1) % 7


def find_entry_for_day(
    entries: Iterable[UserAvailability], dow: int
) -> Optional[UserAvailability]:
    for entry in entries:
        if entry.day_of_week == dow:
            return entry
    return None


def fits_working_hours(
    entries: Iterable[UserAvailability],
    start: datetime,
    end: datetime,
    timezone: str,
) -> bool:
    """
    True if [start, end] lies fully inside the working hours declared for
    the local day on which `start` falls.

    Both the day of week and the wall-clock comparison use the participant's
    own timezone. The candidate may not spill past the entry's end, which
    also rejects anything running over local midnight.
    """
    local_start = to_local(start, timezone)
    local_end = to_local(end, timezone)

    entry = find_entry_for_day(entries, day_of_week(local_start))
    if entry is None:
        return False

    local_midnight = local_start.replace(hour=0, minute=0, second=0, microsecond=0)
    start_offset = (local_start - local_midnight).total_seconds() / 60
    end_offset = (local_end - local_midnight).total_seconds() / 60

    return (
        start_offset >= parse_clock(entry.start_time)
        and end_offset <= parse_clock(entry.end_time)
    )


def is_within_working_hours(
    store,
    user_id: int,
    start: datetime,
    end: datetime,
    timezone: str,
) -> bool:
    """Look up `user_id`'s working hours and check the candidate against them."""
    return fits_working_hours(store.get_user_availability(user_id), start, end, timezone)
