# app/services/storage.py
from datetime import datetime
from typing import Iterable, List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.calendar_event import CalendarEvent
from app.models.meeting import Meeting
from app.models.meeting_preference import MeetingPreference
from app.models.room import Room
from app.models.user import User
from app.models.user_availability import UserAvailability


class RecordNotFoundError(LookupError):
    pass


class SchedulingStore:
    """
    Read/write contracts the scheduler depends on, backed by one Session.

    The search engine only ever reads through this class; writes are used by
    the booking step and the admin endpoints. Write methods take
    `commit=False` so a caller can group several writes into one transaction
    and commit (or roll back) itself.

    Tests replace this with an in-memory fake exposing the same read methods.
    """

    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def _finish(self, obj, commit: bool):
        if commit:
            self.db.commit()
            self.db.refresh(obj)
        else:
            self.db.flush()
        return obj

    # ---------- users ----------

    def create_user(self, *, username: str, email: Optional[str] = None) -> User:
        user = User(username=username, email=email)
        self.db.add(user)
        return self._finish(user, commit=True)

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    # ---------- working hours ----------

    def get_user_availability(self, user_id: int) -> List[UserAvailability]:
        return (
            self.db.query(UserAvailability)
            .filter(UserAvailability.user_id == user_id)
            .order_by(UserAvailability.day_of_week.asc())
            .all()
        )

    def set_user_availability(
        self,
        user_id: int,
        *,
        day_of_week: int,
        start_time: str,
        end_time: str,
    ) -> UserAvailability:
        """Create or replace the working-hours entry for (user, day)."""
        entry = (
            self.db.query(UserAvailability)
            .filter_by(user_id=user_id, day_of_week=day_of_week)
            .first()
        )
        if entry is None:
            entry = UserAvailability(user_id=user_id, day_of_week=day_of_week)
            self.db.add(entry)

        entry.start_time = start_time
        entry.end_time = end_time
        return self._finish(entry, commit=True)

    # ---------- calendar events ----------

    def get_user_calendar_events(
        self, user_id: int, start: datetime, end: datetime
    ) -> List[CalendarEvent]:
        """Events of `user_id` overlapping [start, end], earliest first."""
        return (
            self.db.query(CalendarEvent)
            .filter(
                CalendarEvent.user_id == user_id,
                CalendarEvent.start_time < end,
                CalendarEvent.end_time > start,
            )
            .order_by(CalendarEvent.start_time.asc(), CalendarEvent.id.asc())
            .all()
        )

    def get_room_calendar_events(
        self, room_id: int, start: datetime, end: datetime
    ) -> List[CalendarEvent]:
        return (
            self.db.query(CalendarEvent)
            .filter(
                CalendarEvent.room_id == room_id,
                CalendarEvent.start_time < end,
                CalendarEvent.end_time > start,
            )
            .order_by(CalendarEvent.start_time.asc(), CalendarEvent.id.asc())
            .all()
        )

    def create_calendar_event(
        self,
        *,
        user_id: int,
        title: str,
        start_time: datetime,
        end_time: datetime,
        meeting_id: Optional[int] = None,
        room_id: Optional[int] = None,
        commit: bool = True,
    ) -> CalendarEvent:
        if end_time <= start_time:
            raise ValueError("end_time must be after start_time")

        event = CalendarEvent(
            user_id=user_id,
            title=title,
            start_time=start_time,
            end_time=end_time,
            meeting_id=meeting_id,
            room_id=room_id,
        )
        self.db.add(event)
        return self._finish(event, commit)

    def delete_meeting_calendar_events(self, meeting_id: int, *, commit: bool = True) -> int:
        deleted = (
            self.db.query(CalendarEvent)
            .filter(CalendarEvent.meeting_id == meeting_id)
            .delete(synchronize_session="fetch")
        )
        if commit:
            self.db.commit()
        else:
            self.db.flush()
        return deleted

    def delete_calendar_event(self, event_id: int) -> bool:
        event = self.db.get(CalendarEvent, event_id)
        if event is None:
            return False
        self.db.delete(event)
        self.db.commit()
        return True

    # ---------- preferences ----------

    def get_meeting_preferences(self, user_id: int) -> Optional[MeetingPreference]:
        return self.db.query(MeetingPreference).filter_by(user_id=user_id).first()

    def set_meeting_preferences(self, user_id: int, **fields) -> MeetingPreference:
        """Create or update the single preference row of a user."""
        prefs = self.get_meeting_preferences(user_id)
        if prefs is None:
            prefs = MeetingPreference(user_id=user_id)
            self.db.add(prefs)

        for key, value in fields.items():
            setattr(prefs, key, value)
        if not prefs.timezone:
            prefs.timezone = "UTC"
        return self._finish(prefs, commit=True)

    # ---------- rooms ----------

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.db.get(Room, room_id)

    def get_rooms(self) -> List[Room]:
        return self.db.query(Room).order_by(Room.id.asc()).all()

    def create_room(
        self,
        *,
        name: str,
        capacity: int,
        location: Optional[str] = None,
        is_available: bool = True,
    ) -> Room:
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        room = Room(
            name=name,
            capacity=capacity,
            location=location,
            is_available=is_available,
        )
        self.db.add(room)
        return self._finish(room, commit=True)

    def update_room(self, room_id: int, **fields) -> Room:
        room = self.db.get(Room, room_id)
        if room is None:
            raise RecordNotFoundError(f"Room {room_id} not found")
        for key, value in fields.items():
            setattr(room, key, value)
        return self._finish(room, commit=True)

    def get_available_rooms(
        self,
        start: datetime,
        end: datetime,
        min_capacity: Optional[int] = None,
    ) -> List[Room]:
        """
        Rooms flagged available, large enough, and with no booking
        overlapping [start, end]. Ordered by id.
        """
        query = self.db.query(Room).filter(Room.is_available.is_(True))
        if min_capacity:
            query = query.filter(Room.capacity >= min_capacity)
        rooms = query.order_by(Room.id.asc()).all()

        booked_room_ids = {
            room_id
            for (room_id,) in self.db.query(CalendarEvent.room_id).filter(
                CalendarEvent.room_id.isnot(None),
                CalendarEvent.start_time < end,
                CalendarEvent.end_time > start,
            )
        }
        return [room for room in rooms if room.id not in booked_room_ids]

    # ---------- meetings ----------

    def create_meeting(
        self,
        *,
        title: str,
        date: datetime,
        description: Optional[str] = None,
        user_id: Optional[int] = None,
        room_id: Optional[int] = None,
    ) -> Meeting:
        meeting = Meeting(
            title=title,
            date=date,
            description=description,
            user_id=user_id,
            room_id=room_id,
        )
        self.db.add(meeting)
        return self._finish(meeting, commit=True)

    def get_meeting(self, meeting_id: int) -> Optional[Meeting]:
        return self.db.get(Meeting, meeting_id)

    def update_meeting(self, meeting_id: int, *, commit: bool = True, **fields) -> Meeting:
        meeting = self.get_meeting(meeting_id)
        if meeting is None:
            raise RecordNotFoundError(f"Meeting {meeting_id} not found")
        for key, value in fields.items():
            setattr(meeting, key, value)
        return self._finish(meeting, commit)

    def get_users(self, user_ids: Iterable[int]) -> List[User]:
        ids = list(user_ids)
        if not ids:
            return []
        return self.db.query(User).filter(User.id.in_(ids)).all()


def get_scheduling_store(db: Session = Depends(get_db)) -> SchedulingStore:
    """FastAPI dependency; override in tests to inject a fake."""
    return SchedulingStore(db)
