# app/models/__init__.py
from app.models.base import Base  # noqa: F401

from app.models.user import User  # noqa: F401
from app.models.room import Room  # noqa: F401
from app.models.meeting import Meeting  # noqa: F401
from app.models.calendar_event import CalendarEvent  # noqa: F401
from app.models.user_availability import UserAvailability  # noqa: F401
from app.models.meeting_preference import MeetingPreference  # noqa: F401
