from sqlalchemy import Column, ForeignKey, Integer, String

from app.models.base import Base


class MeetingPreference(Base):
    __tablename__ = "meeting_preferences"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # IANA name, e.g. "Europe/London"
    timezone = Column(String(64), nullable=False, default="UTC")

    # All in minutes
    preferred_duration = Column(Integer, nullable=True)
    preferred_room_capacity = Column(Integer, nullable=True)
    reminder_time = Column(Integer, nullable=True)
    buffer_time = Column(Integer, nullable=True)
