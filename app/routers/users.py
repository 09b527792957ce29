# app/routers/users.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError

from app.schemas.scheduling import (
    CalendarEventIn,
    CalendarEventOut,
    MeetingPreferenceIn,
    MeetingPreferenceOut,
    UserCreate,
    UserOut,
    WorkingHoursIn,
    WorkingHoursOut,
)
from app.services.storage import SchedulingStore, get_scheduling_store
from app.services.time_utils import to_naive_utc

router = APIRouter()


def _require_user(store: SchedulingStore, user_id: int) -> None:
    if not store.get_user(user_id):
        raise HTTPException(status_code=404, detail="User not found")


@router.post("/users", response_model=UserOut)
def create_user(
    payload: UserCreate,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    try:
        user = store.create_user(username=payload.username, email=payload.email)
    except IntegrityError:
        store.rollback()
        raise HTTPException(status_code=400, detail="username already exists")
    return UserOut.model_validate(user)


# ---------- working hours ----------


@router.get("/users/{user_id}/availability", response_model=List[WorkingHoursOut])
def get_availability(
    user_id: int,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    _require_user(store, user_id)
    return [WorkingHoursOut.model_validate(e) for e in store.get_user_availability(user_id)]


@router.post("/users/{user_id}/availability", response_model=WorkingHoursOut, status_code=201)
def set_availability(
    user_id: int,
    payload: WorkingHoursIn,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    """Set (or replace) the working hours for one day of the week."""
    _require_user(store, user_id)
    entry = store.set_user_availability(
        user_id,
        day_of_week=payload.day_of_week,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    return WorkingHoursOut.model_validate(entry)


# ---------- preferences ----------


@router.get("/users/{user_id}/meeting-preferences", response_model=MeetingPreferenceOut)
def get_preferences(
    user_id: int,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    prefs = store.get_meeting_preferences(user_id)
    if not prefs:
        raise HTTPException(status_code=404, detail="No meeting preferences set")
    return MeetingPreferenceOut.model_validate(prefs)


@router.post(
    "/users/{user_id}/meeting-preferences",
    response_model=MeetingPreferenceOut,
    status_code=201,
)
def set_preferences(
    user_id: int,
    payload: MeetingPreferenceIn,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    _require_user(store, user_id)
    prefs = store.set_meeting_preferences(user_id, **payload.model_dump())
    return MeetingPreferenceOut.model_validate(prefs)


# ---------- calendar events ----------


@router.get("/users/{user_id}/calendar-events", response_model=List[CalendarEventOut])
def list_calendar_events(
    user_id: int,
    start: datetime,
    end: datetime,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    events = store.get_user_calendar_events(user_id, to_naive_utc(start), to_naive_utc(end))
    return [CalendarEventOut.model_validate(e) for e in events]


@router.post(
    "/users/{user_id}/calendar-events",
    response_model=CalendarEventOut,
    status_code=201,
)
def create_calendar_event(
    user_id: int,
    payload: CalendarEventIn,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    _require_user(store, user_id)
    event = store.create_calendar_event(
        user_id=user_id,
        title=payload.title,
        start_time=payload.start_time,
        end_time=payload.end_time,
        meeting_id=payload.meeting_id,
        room_id=payload.room_id,
    )
    return CalendarEventOut.model_validate(event)


@router.delete("/calendar-events/{event_id}", status_code=204)
def delete_calendar_event(
    event_id: int,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    if not store.delete_calendar_event(event_id):
        raise HTTPException(status_code=404, detail="Calendar event not found")
