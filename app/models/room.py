from sqlalchemy import Boolean, Column, Integer, String

from app.models.base import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    capacity = Column(Integer, nullable=False)
    location = Column(String(255), nullable=True)

    # Set by room administration, independent of bookings
    is_available = Column(Boolean, nullable=False, default=True)
