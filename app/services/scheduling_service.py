# app/services/scheduling_service.py
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from app.config import get_settings
from app.models.calendar_event import CalendarEvent
from app.models.room import Room
from app.models.user_availability import UserAvailability
from app.services.availability_service import fits_working_hours
from app.services.conflict_service import find_conflicts
from app.services.room_service import find_available_rooms
from app.services.time_utils import to_naive_utc

logger = logging.getLogger(__name__)


@dataclass
class TimeSlot:
    start_time: datetime
    end_time: datetime
    room: Optional[Room]
    score: int


@dataclass
class ParticipantConflicts:
    user_id: int
    conflicts: List[CalendarEvent] = field(default_factory=list)


@dataclass
class SchedulingSuggestion:
    time_slots: List[TimeSlot]
    participants: List[ParticipantConflicts]


@dataclass
class _ParticipantContext:
    """Everything read from storage for one participant, once per search."""

    user_id: int
    timezone: str
    preferred_duration: Optional[int]
    buffer_time: Optional[int]
    working_hours: List[UserAvailability]
    events: List[CalendarEvent]


def _load_participant(
    store,
    user_id: int,
    *,
    earliest_start: datetime,
    latest_start: datetime,
    duration: timedelta,
    default_timezone: str,
) -> _ParticipantContext:
    prefs = store.get_meeting_preferences(user_id)
    timezone = (prefs.timezone if prefs else None) or default_timezone
    preferred_duration = prefs.preferred_duration if prefs else None
    buffer_time = prefs.buffer_time if prefs else None

    # Cover every instant a candidate (plus buffer) can touch
    pad = timedelta(minutes=buffer_time or 0)
    events = store.get_user_calendar_events(
        user_id,
        earliest_start - pad,
        latest_start + duration + pad,
    )

    return _ParticipantContext(
        user_id=user_id,
        timezone=timezone,
        preferred_duration=preferred_duration,
        buffer_time=buffer_time,
        working_hours=list(store.get_user_availability(user_id)),
        events=list(events),
    )


def _participant_score(
    ctx: _ParticipantContext,
    *,
    slot_start: datetime,
    slot_end: datetime,
    duration_minutes: int,
) -> int:
    """
    +2 if the participant prefers exactly this duration
    +1 if they have a buffer and nothing intrudes on it
    """
    score = 0
    if ctx.preferred_duration == duration_minutes:
        score += 2
    if ctx.buffer_time:
        if not find_conflicts(ctx.events, slot_start, slot_end, ctx.buffer_time):
            score += 1
    return score


def suggest_meeting_times(
    store,
    *,
    participant_ids: Sequence[int],
    duration_minutes: int,
    earliest_start: datetime,
    latest_start: datetime,
    required_capacity: Optional[int] = 0,
) -> SchedulingSuggestion:
    """
    Walk [earliest_start, latest_start) in fixed increments and return the
    best-scoring viable slots.

    A candidate is viable when a room qualifies and every participant is
    inside working hours with no conflicting event. Per increment,
    participants are checked in input order and the check stops at the
    first one that fails; if that failure is a conflict, it replaces
    whatever was recorded for that participant before. The returned
    conflicts are therefore the last ones seen per participant, not
    necessarily tied to any returned slot.

    Slots are sorted by score (stable, so earlier starts win ties) and cut
    to MAX_SUGGESTIONS.

    Storage errors are not caught: the whole search fails.
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    settings = get_settings()
    increment = timedelta(minutes=settings.SLOT_INCREMENT_MINUTES)
    if increment <= timedelta(0):
        raise ValueError("SLOT_INCREMENT_MINUTES must be positive")

    earliest_start = to_naive_utc(earliest_start)
    latest_start = to_naive_utc(latest_start)
    duration = timedelta(minutes=duration_minutes)

    participant_ids = list(participant_ids)
    if not participant_ids:
        return SchedulingSuggestion(time_slots=[], participants=[])

    contexts = [
        _load_participant(
            store,
            user_id,
            earliest_start=earliest_start,
            latest_start=latest_start,
            duration=duration,
            default_timezone=settings.DEFAULT_TIMEZONE,
        )
        for user_id in participant_ids
    ]

    participant_conflicts: Dict[int, List[CalendarEvent]] = {}
    candidates: List[TimeSlot] = []

    t = earliest_start
    while t < latest_start:
        slot_start = t
        slot_end = t + duration
        t += increment

        rooms = find_available_rooms(store, slot_start, slot_end, required_capacity)
        if not rooms:
            continue

        slot_score = 0
        is_viable = True

        for ctx in contexts:
            if not fits_working_hours(ctx.working_hours, slot_start, slot_end, ctx.timezone):
                is_viable = False
                break

            check_buffer = ctx.buffer_time if settings.ENFORCE_BUFFER_TIME else None
            conflicts = find_conflicts(ctx.events, slot_start, slot_end, check_buffer)
            if conflicts:
                is_viable = False
                participant_conflicts[ctx.user_id] = conflicts
                break

            slot_score += _participant_score(
                ctx,
                slot_start=slot_start,
                slot_end=slot_end,
                duration_minutes=duration_minutes,
            )

        if not is_viable:
            logger.debug("Slot %s not viable", slot_start.isoformat())
            continue

        candidates.append(
            TimeSlot(
                start_time=slot_start,
                end_time=slot_end,
                room=rooms[0],
                score=slot_score,
            )
        )

    # sorted() is stable, so equal scores keep walk order
    ranked = sorted(candidates, key=lambda s: s.score, reverse=True)

    logger.info(
        "Slot search for %d participant(s), %s - %s: %d viable, returning %d",
        len(participant_ids),
        earliest_start.isoformat(),
        latest_start.isoformat(),
        len(candidates),
        min(len(ranked), settings.MAX_SUGGESTIONS),
    )

    return SchedulingSuggestion(
        time_slots=ranked[: settings.MAX_SUGGESTIONS],
        participants=[
            ParticipantConflicts(
                user_id=user_id,
                conflicts=list(participant_conflicts.get(user_id, [])),
            )
            for user_id in participant_ids
        ],
    )
