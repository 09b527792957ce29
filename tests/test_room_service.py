# tests/test_room_service.py
from datetime import datetime

from app.models.room import Room
from app.services.room_service import find_available_rooms


class FakeRoomStore:
    def __init__(self, rooms):
        self.rooms = rooms
        self.calls = []

    def get_available_rooms(self, start, end, min_capacity=None):
        self.calls.append((start, end, min_capacity))
        return list(self.rooms)


def test_find_available_rooms_passes_interval_and_capacity():
    big = Room(id=2, name="Big", capacity=12, is_available=True)
    small = Room(id=1, name="Small", capacity=4, is_available=True)
    store = FakeRoomStore([small, big])

    start = datetime(2025, 1, 6, 9, 0)
    end = datetime(2025, 1, 6, 9, 30)
    rooms = find_available_rooms(store, start, end, 3)

    # storage order is kept
    assert rooms == [small, big]
    assert store.calls == [(start, end, 3)]


def test_find_available_rooms_empty():
    store = FakeRoomStore([])
    assert find_available_rooms(
        store, datetime(2025, 1, 6, 9, 0), datetime(2025, 1, 6, 9, 30), 1
    ) == []
