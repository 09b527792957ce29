# app/models/calendar_event.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.models.base import Base


class CalendarEvent(Base):
    """
    An existing commitment on a user's calendar.

    Rooms are booked through the same table: an event carrying a room_id
    occupies that room for [start_time, end_time).
    """

    __tablename__ = "calendar_events"
    __table_args__ = (
        Index("calendar_events_time_range_idx", "start_time", "end_time"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(255), nullable=False)

    # Naive UTC
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    meeting_id = Column(
        Integer,
        ForeignKey("meetings.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    room_id = Column(
        Integer,
        ForeignKey("rooms.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    user = relationship("User", backref="calendar_events")
    meeting = relationship("Meeting", backref="calendar_events")
    room = relationship("Room", backref="calendar_events")
