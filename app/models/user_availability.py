# app/models/user_availability.py
from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint

from app.models.base import Base


class UserAvailability(Base):
    """
    Working hours declared by a user for one day of the week.

    day_of_week: 0=Sunday ... 6=Saturday
    start_time / end_time: "HH:mm" wall-clock in the user's own timezone
    (the timezone lives on MeetingPreference).

    No row for a given day means the user is unavailable that day.
    """

    __tablename__ = "user_availability"
    __table_args__ = (
        UniqueConstraint("user_id", "day_of_week", name="user_availability_user_day_uq"),
    )

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    day_of_week = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
