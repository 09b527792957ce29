# app/routers/scheduling.py
from fastapi import APIRouter, Depends, HTTPException

from app.schemas.scheduling import (
    MeetingCreate,
    MeetingOut,
    ScheduleMeetingRequest,
    SchedulingSuggestionOut,
    SuggestTimesRequest,
)
from app.services.meeting_service import (
    MeetingNotFoundError,
    RoomUnavailableError,
    SlotConflictError,
    schedule_new_meeting,
)
from app.services.scheduling_service import suggest_meeting_times
from app.services.storage import SchedulingStore, get_scheduling_store

router = APIRouter()


@router.post("/suggest-times", response_model=SchedulingSuggestionOut)
def suggest_times(
    payload: SuggestTimesRequest,
    store: SchedulingStore = Depends(get_scheduling_store),
) -> SchedulingSuggestionOut:
    """
    Suggest up to 5 slots where a room and every participant are free.

    Also reports, per participant, the calendar events that blocked them
    at the last increment where they were the first to fail.
    """
    try:
        suggestion = suggest_meeting_times(
            store,
            participant_ids=payload.participant_ids,
            duration_minutes=payload.duration,
            earliest_start=payload.earliest_start_time,
            latest_start=payload.latest_start_time,
            required_capacity=payload.required_capacity,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SchedulingSuggestionOut.model_validate(suggestion)


@router.post("", response_model=MeetingOut)
def create_meeting(
    payload: MeetingCreate,
    store: SchedulingStore = Depends(get_scheduling_store),
) -> MeetingOut:
    meeting = store.create_meeting(
        title=payload.title,
        date=payload.date,
        description=payload.description,
        user_id=payload.user_id,
        room_id=payload.room_id,
    )
    return MeetingOut.model_validate(meeting)


@router.get("/{meeting_id}", response_model=MeetingOut)
def get_meeting(
    meeting_id: int,
    store: SchedulingStore = Depends(get_scheduling_store),
) -> MeetingOut:
    meeting = store.get_meeting(meeting_id)
    if not meeting:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return MeetingOut.model_validate(meeting)


@router.post("/{meeting_id}/schedule", response_model=MeetingOut)
def schedule_meeting(
    meeting_id: int,
    payload: ScheduleMeetingRequest,
    store: SchedulingStore = Depends(get_scheduling_store),
) -> MeetingOut:
    """
    Book a slot for an existing meeting.

    Availability is re-checked at commit time; if someone else took the
    slot since it was suggested, nothing is written and 409 is returned.
    """
    try:
        meeting = schedule_new_meeting(
            store,
            meeting_id=meeting_id,
            start_time=payload.start_time,
            end_time=payload.end_time,
            participant_ids=payload.participant_ids,
            room_id=payload.room_id,
        )
    except MeetingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SlotConflictError as e:
        raise HTTPException(
            status_code=409,
            detail={
                "message": str(e),
                "conflicts": {
                    who: [event.id for event in events]
                    for who, events in e.conflicts.items()
                },
            },
        )
    except RoomUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return MeetingOut.model_validate(meeting)
