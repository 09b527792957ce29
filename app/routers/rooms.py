# app/routers/rooms.py
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.schemas.scheduling import RoomCreate, RoomOut, RoomUpdate
from app.services.room_service import find_available_rooms
from app.services.storage import (
    RecordNotFoundError,
    SchedulingStore,
    get_scheduling_store,
)
from app.services.time_utils import to_naive_utc

router = APIRouter()


@router.get("", response_model=List[RoomOut])
def list_rooms(store: SchedulingStore = Depends(get_scheduling_store)):
    return [RoomOut.model_validate(r) for r in store.get_rooms()]


@router.post("", response_model=RoomOut)
def create_room(
    payload: RoomCreate,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    room = store.create_room(
        name=payload.name,
        capacity=payload.capacity,
        location=payload.location,
        is_available=payload.is_available,
    )
    return RoomOut.model_validate(room)


@router.patch("/{room_id}", response_model=RoomOut)
def update_room(
    room_id: int,
    payload: RoomUpdate,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    try:
        room = store.update_room(room_id, **payload.model_dump(exclude_unset=True))
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return RoomOut.model_validate(room)


@router.get("/available", response_model=List[RoomOut])
def list_available_rooms(
    start_time: datetime,
    end_time: datetime,
    capacity: Optional[int] = None,
    store: SchedulingStore = Depends(get_scheduling_store),
):
    """Rooms that are enabled, big enough and not booked in [start_time, end_time]."""
    start_time = to_naive_utc(start_time)
    end_time = to_naive_utc(end_time)
    if end_time <= start_time:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")

    rooms = find_available_rooms(store, start_time, end_time, capacity)
    return [RoomOut.model_validate(r) for r in rooms]
