# tests/test_meeting_service.py
from datetime import datetime

import pytest
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.session import engine, SessionLocal
from app.models import (
    Base,
    CalendarEvent,
    Meeting,
    MeetingPreference,
    Room,
    User,
    UserAvailability,
)
from app.services.meeting_service import (
    MeetingNotFoundError,
    RoomUnavailableError,
    SlotConflictError,
    schedule_new_meeting,
)
from app.services.storage import SchedulingStore


def setup_module(module):
    Base.metadata.create_all(bind=engine)


def _clean_db():
    db: Session = SessionLocal()
    try:
        db.query(CalendarEvent).delete()
        db.query(Meeting).delete()
        db.query(MeetingPreference).delete()
        db.query(UserAvailability).delete()
        db.query(Room).delete()
        db.query(User).delete()
        db.commit()
    finally:
        db.close()


def _at(h: int, m: int = 0) -> datetime:
    return datetime(2025, 1, 6, h, m)


def _setup(store: SchedulingStore):
    alice = store.create_user(username="alice")
    bob = store.create_user(username="bob")
    room = store.create_room(name="Board room", capacity=6)
    meeting = store.create_meeting(title="Planning", date=_at(8), user_id=alice.id)
    return alice, bob, room, meeting


def test_schedule_new_meeting_books_everyone_and_the_room():
    _clean_db()
    db = SessionLocal()
    try:
        store = SchedulingStore(db)
        alice, bob, room, meeting = _setup(store)

        booked = schedule_new_meeting(
            store,
            meeting_id=meeting.id,
            start_time=_at(10),
            end_time=_at(10, 30),
            participant_ids=[alice.id, bob.id],
            room_id=room.id,
        )

        assert booked.date == _at(10)
        assert booked.room_id == room.id

        events = db.query(CalendarEvent).order_by(CalendarEvent.user_id).all()
        assert [e.user_id for e in events] == [alice.id, bob.id]
        for e in events:
            assert e.title == "Planning"
            assert e.meeting_id == meeting.id
            assert e.room_id == room.id
            assert (e.start_time, e.end_time) == (_at(10), _at(10, 30))

        # the room is now taken for that interval
        assert store.get_available_rooms(_at(10), _at(10, 30), 1) == []
    finally:
        db.close()


def test_schedule_new_meeting_rejects_stale_slot_and_writes_nothing():
    _clean_db()
    db = SessionLocal()
    try:
        store = SchedulingStore(db)
        alice, bob, room, meeting = _setup(store)

        # Someone grabbed bob's time after the search
        store.create_calendar_event(
            user_id=bob.id, title="Dentist", start_time=_at(10, 15), end_time=_at(11)
        )

        with pytest.raises(SlotConflictError) as exc:
            schedule_new_meeting(
                store,
                meeting_id=meeting.id,
                start_time=_at(10),
                end_time=_at(10, 30),
                participant_ids=[alice.id, bob.id],
                room_id=room.id,
            )

        assert list(exc.value.conflicts) == [str(bob.id)]

        db.expire_all()
        assert db.get(Meeting, meeting.id).date == _at(8)
        assert db.query(CalendarEvent).filter_by(meeting_id=meeting.id).count() == 0
    finally:
        db.close()


def test_schedule_new_meeting_rejects_booked_room():
    _clean_db()
    db = SessionLocal()
    try:
        store = SchedulingStore(db)
        alice, bob, room, meeting = _setup(store)
        carol = store.create_user(username="carol")

        store.create_calendar_event(
            user_id=carol.id,
            title="Other meeting",
            start_time=_at(10),
            end_time=_at(11),
            room_id=room.id,
        )

        with pytest.raises(SlotConflictError) as exc:
            schedule_new_meeting(
                store,
                meeting_id=meeting.id,
                start_time=_at(10),
                end_time=_at(10, 30),
                participant_ids=[alice.id],
                room_id=room.id,
            )
        assert "room" in exc.value.conflicts
    finally:
        db.close()


def test_rescheduling_replaces_previous_booking():
    _clean_db()
    db = SessionLocal()
    try:
        store = SchedulingStore(db)
        alice, bob, room, meeting = _setup(store)

        schedule_new_meeting(
            store,
            meeting_id=meeting.id,
            start_time=_at(10),
            end_time=_at(10, 30),
            participant_ids=[alice.id, bob.id],
            room_id=room.id,
        )
        # Overlaps the first booking, which belongs to the same meeting
        schedule_new_meeting(
            store,
            meeting_id=meeting.id,
            start_time=_at(10, 15),
            end_time=_at(10, 45),
            participant_ids=[alice.id, bob.id],
            room_id=room.id,
        )

        events = db.query(CalendarEvent).filter_by(meeting_id=meeting.id).all()
        assert len(events) == 2
        assert {e.start_time for e in events} == {_at(10, 15)}
    finally:
        db.close()


def test_schedule_new_meeting_unknown_meeting_or_participant():
    _clean_db()
    db = SessionLocal()
    try:
        store = SchedulingStore(db)
        alice, bob, room, meeting = _setup(store)

        with pytest.raises(MeetingNotFoundError):
            schedule_new_meeting(
                store,
                meeting_id=meeting.id + 1000,
                start_time=_at(10),
                end_time=_at(10, 30),
                participant_ids=[alice.id],
            )

        with pytest.raises(ValueError):
            schedule_new_meeting(
                store,
                meeting_id=meeting.id,
                start_time=_at(10),
                end_time=_at(10, 30),
                participant_ids=[alice.id, bob.id + 1000],
            )

        with pytest.raises(ValueError):
            schedule_new_meeting(
                store,
                meeting_id=meeting.id,
                start_time=_at(10, 30),
                end_time=_at(10),
                participant_ids=[alice.id],
            )
    finally:
        db.close()


def test_schedule_new_meeting_refuses_disabled_room():
    _clean_db()
    db = SessionLocal()
    try:
        store = SchedulingStore(db)
        alice, bob, room, meeting = _setup(store)
        store.update_room(room.id, is_available=False)

        with pytest.raises(RoomUnavailableError):
            schedule_new_meeting(
                store,
                meeting_id=meeting.id,
                start_time=_at(10),
                end_time=_at(10, 30),
                participant_ids=[alice.id, bob.id],
                room_id=room.id,
            )

        db.expire_all()
        assert db.get(Meeting, meeting.id).room_id is None
        assert db.query(CalendarEvent).count() == 0
    finally:
        db.close()


@pytest.fixture
def enforce_buffer():
    settings = get_settings()
    saved = settings.ENFORCE_BUFFER_TIME
    yield settings
    settings.ENFORCE_BUFFER_TIME = saved


def _book_next_to_bobs_call(store):
    alice, bob, room, meeting = _setup(store)
    store.set_meeting_preferences(bob.id, buffer_time=30)
    call = store.create_calendar_event(
        user_id=bob.id, title="Call", start_time=_at(10, 30), end_time=_at(11)
    )

    def book():
        return schedule_new_meeting(
            store,
            meeting_id=meeting.id,
            start_time=_at(10),
            end_time=_at(10, 30),
            participant_ids=[alice.id, bob.id],
            room_id=room.id,
        )

    return bob, call, book


def test_schedule_new_meeting_respects_buffer_time(enforce_buffer):
    enforce_buffer.ENFORCE_BUFFER_TIME = True
    _clean_db()
    db = SessionLocal()
    try:
        store = SchedulingStore(db)
        bob, call, book = _book_next_to_bobs_call(store)

        # back-to-back with bob's call, inside his 30 minute buffer
        with pytest.raises(SlotConflictError) as exc:
            book()

        assert {who: [e.id for e in events] for who, events in exc.value.conflicts.items()} == {
            str(bob.id): [call.id]
        }
    finally:
        db.close()


def test_schedule_new_meeting_ignores_buffer_when_not_enforced(enforce_buffer):
    enforce_buffer.ENFORCE_BUFFER_TIME = False
    _clean_db()
    db = SessionLocal()
    try:
        store = SchedulingStore(db)
        bob, call, book = _book_next_to_bobs_call(store)

        booked = book()

        assert booked.date == _at(10)
    finally:
        db.close()
