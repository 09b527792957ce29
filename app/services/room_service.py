# app/services/room_service.py
import logging
from datetime import datetime
from typing import List, Optional

from app.models.room import Room

logger = logging.getLogger(__name__)


def find_available_rooms(
    store,
    start: datetime,
    end: datetime,
    required_capacity: Optional[int] = None,
) -> List[Room]:
    """
    Rooms usable for [start, end]: flagged available, capacity at least
    `required_capacity`, and not booked by any overlapping event.

    Order is whatever storage returns; callers take the first one.
    """
    rooms = store.get_available_rooms(start, end, required_capacity)
    if not rooms:
        logger.debug(
            "No room with capacity >= %s free for %s - %s",
            required_capacity,
            start.isoformat(),
            end.isoformat(),
        )
    return rooms
