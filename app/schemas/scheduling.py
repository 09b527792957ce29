# app/schemas/scheduling.py
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.config import get_settings
from app.services.availability_service import parse_clock
from app.services.time_utils import get_zone, to_naive_utc


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ---------- outputs ----------


class UserOut(ORMModel):
    id: int
    username: str
    email: Optional[str] = None


class RoomOut(ORMModel):
    id: int
    name: str
    capacity: int
    location: Optional[str] = None
    is_available: bool


class CalendarEventOut(ORMModel):
    id: int
    user_id: int
    title: str
    start_time: datetime
    end_time: datetime
    meeting_id: Optional[int] = None
    room_id: Optional[int] = None


class WorkingHoursOut(ORMModel):
    id: int
    user_id: int
    day_of_week: int
    start_time: str
    end_time: str


class MeetingPreferenceOut(ORMModel):
    id: int
    user_id: int
    timezone: str
    preferred_duration: Optional[int] = None
    preferred_room_capacity: Optional[int] = None
    reminder_time: Optional[int] = None
    buffer_time: Optional[int] = None


class MeetingOut(ORMModel):
    id: int
    title: str
    date: datetime
    description: Optional[str] = None
    user_id: Optional[int] = None
    room_id: Optional[int] = None
    is_completed: bool


class TimeSlotOut(ORMModel):
    start_time: datetime
    end_time: datetime
    room: Optional[RoomOut] = None
    score: int


class ParticipantConflictsOut(ORMModel):
    user_id: int
    conflicts: List[CalendarEventOut] = Field(default_factory=list)


class SchedulingSuggestionOut(ORMModel):
    time_slots: List[TimeSlotOut]
    participants: List[ParticipantConflictsOut]


# ---------- inputs ----------


class SuggestTimesRequest(BaseModel):
    participant_ids: List[int]
    duration: int
    earliest_start_time: datetime
    latest_start_time: datetime
    required_capacity: int = Field(default=0, ge=0)

    @field_validator("earliest_start_time", "latest_start_time")
    def normalize_instant(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @field_validator("duration")
    def validate_duration(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("duration must be positive")
        return v

    @model_validator(mode="after")
    def check_window(self) -> "SuggestTimesRequest":
        if self.latest_start_time < self.earliest_start_time:
            raise ValueError("latest_start_time must not be before earliest_start_time")
        max_days = get_settings().MAX_SEARCH_DAYS
        if self.latest_start_time - self.earliest_start_time > timedelta(days=max_days):
            raise ValueError(f"search window must not exceed {max_days} days")
        return self


class MeetingCreate(BaseModel):
    title: str
    date: datetime
    description: Optional[str] = None
    user_id: Optional[int] = None
    room_id: Optional[int] = None

    @field_validator("date")
    def normalize_instant(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class ScheduleMeetingRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    participant_ids: List[int] = Field(min_length=1)
    room_id: Optional[int] = None

    @field_validator("start_time", "end_time")
    def normalize_instant(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_end_after_start(self) -> "ScheduleMeetingRequest":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class RoomCreate(BaseModel):
    name: str
    capacity: int = Field(ge=0)
    location: Optional[str] = None
    is_available: bool = True


class RoomUpdate(BaseModel):
    name: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    is_available: Optional[bool] = None


class UserCreate(BaseModel):
    username: str
    email: Optional[str] = None


class WorkingHoursIn(BaseModel):
    day_of_week: int = Field(ge=0, le=6)  # 0=Sunday
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    def validate_clock(cls, v: str) -> str:
        parse_clock(v)
        return v

    @model_validator(mode="after")
    def check_end_after_start(self) -> "WorkingHoursIn":
        if parse_clock(self.end_time) <= parse_clock(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class MeetingPreferenceIn(BaseModel):
    timezone: str = "UTC"
    preferred_duration: Optional[int] = Field(default=None, gt=0)
    preferred_room_capacity: Optional[int] = Field(default=None, ge=0)
    reminder_time: Optional[int] = Field(default=None, ge=0)
    buffer_time: Optional[int] = Field(default=None, ge=0)

    @field_validator("timezone")
    def validate_timezone(cls, v: str) -> str:
        get_zone(v)
        return v


class CalendarEventIn(BaseModel):
    title: str
    start_time: datetime
    end_time: datetime
    meeting_id: Optional[int] = None
    room_id: Optional[int] = None

    @field_validator("start_time", "end_time")
    def normalize_instant(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_end_after_start(self) -> "CalendarEventIn":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self
