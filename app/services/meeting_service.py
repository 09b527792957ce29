# app/services/meeting_service.py
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from app.models.calendar_event import CalendarEvent
from app.config import get_settings
from app.models.meeting import Meeting
from app.services.conflict_service import get_conflicts
from app.services.storage import RecordNotFoundError
from app.services.time_utils import to_naive_utc

logger = logging.getLogger(__name__)


class MeetingNotFoundError(RecordNotFoundError):
    pass


class SlotConflictError(Exception):
    """
    The slot was taken between search and booking.

    `conflicts` maps user id (or "room") to the clashing events.
    """

    def __init__(self, conflicts: Dict[str, List[CalendarEvent]]):
        self.conflicts = conflicts
        who = ", ".join(conflicts)
        super().__init__(f"Slot no longer free for: {who}")


class RoomUnavailableError(ValueError):
    pass


def _collect_conflicts(
    store,
    *,
    meeting_id: int,
    participant_ids: Sequence[int],
    room_id: Optional[int],
    start_time: datetime,
    end_time: datetime,
) -> Dict[str, List[CalendarEvent]]:
    # The meeting's own events (from an earlier booking) never conflict
    def others(events):
        return [e for e in events if e.meeting_id != meeting_id]

    enforce_buffer = get_settings().ENFORCE_BUFFER_TIME

    found: Dict[str, List[CalendarEvent]] = {}
    for user_id in participant_ids:
        buffer_minutes = None
        if enforce_buffer:
            prefs = store.get_meeting_preferences(user_id)
            buffer_minutes = prefs.buffer_time if prefs else None
        events = others(
            get_conflicts(store, user_id, start_time, end_time, buffer_minutes)
        )
        if events:
            found[str(user_id)] = events
    if room_id is not None:
        events = others(store.get_room_calendar_events(room_id, start_time, end_time))
        if events:
            found["room"] = events
    return found


def schedule_new_meeting(
    store,
    *,
    meeting_id: int,
    start_time: datetime,
    end_time: datetime,
    participant_ids: Sequence[int],
    room_id: Optional[int] = None,
) -> Meeting:
    """
    Book a slot (usually one returned by suggest_meeting_times):

      - Re-check every participant and the room for overlapping events,
        since the search result may be stale. With ENFORCE_BUFFER_TIME a
        participant's buffer widens their check, as in the search
      - Refuse a room flagged unavailable (RoomUnavailableError)
      - Move the meeting to start_time (and room_id)
      - Replace any events from an earlier booking of this meeting with one
        CalendarEvent per participant, carrying the room

    Everything happens in one transaction; a conflict rolls it back and
    raises SlotConflictError. This narrows the search/booking race but is
    not a lock: without serializable isolation two concurrent bookings can
    still both pass the check.
    """
    start_time = to_naive_utc(start_time)
    end_time = to_naive_utc(end_time)
    if end_time <= start_time:
        raise ValueError("end_time must be after start_time")

    participant_ids = list(dict.fromkeys(participant_ids))
    if not participant_ids:
        raise ValueError("At least one participant is required")

    meeting = store.get_meeting(meeting_id)
    if meeting is None:
        raise MeetingNotFoundError(f"Meeting {meeting_id} not found")

    known = {user.id for user in store.get_users(participant_ids)}
    missing = [user_id for user_id in participant_ids if user_id not in known]
    if missing:
        raise ValueError(f"Unknown participant(s): {missing}")

    if room_id is not None:
        room = store.get_room(room_id)
        if room is None:
            raise ValueError(f"Unknown room: {room_id}")
        if not room.is_available:
            raise RoomUnavailableError(f"Room {room_id} is not available for booking")

    try:
        conflicts = _collect_conflicts(
            store,
            meeting_id=meeting_id,
            participant_ids=participant_ids,
            room_id=room_id,
            start_time=start_time,
            end_time=end_time,
        )
        if conflicts:
            raise SlotConflictError(conflicts)

        meeting = store.update_meeting(
            meeting_id,
            date=start_time,
            room_id=room_id,
            commit=False,
        )

        # Rescheduling replaces the previous booking
        store.delete_meeting_calendar_events(meeting_id, commit=False)

        for user_id in participant_ids:
            store.create_calendar_event(
                user_id=user_id,
                title=meeting.title,
                start_time=start_time,
                end_time=end_time,
                meeting_id=meeting.id,
                room_id=room_id,
                commit=False,
            )

        store.commit()
    except Exception:
        store.rollback()
        raise

    logger.info(
        "Booked meeting %s at %s for %d participant(s), room=%s",
        meeting_id,
        start_time.isoformat(),
        len(participant_ids),
        room_id,
    )
    return store.get_meeting(meeting_id)
