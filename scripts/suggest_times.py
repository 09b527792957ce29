# scripts/suggest_times.py
"""
Run one slot search against the configured database and print the result.

Example:
    python -m scripts.suggest_times --participant 1 --participant 2 \
        --duration 30 --earliest 2025-01-06T09:00 --latest 2025-01-06T12:00 \
        --capacity 2
"""

from __future__ import annotations

import argparse
from datetime import datetime

from app.db.session import SessionLocal
from app.services.scheduling_service import suggest_meeting_times
from app.services.storage import SchedulingStore


def run_once(
    participant_ids: list[int],
    duration: int,
    earliest: datetime,
    latest: datetime,
    capacity: int = 0,
) -> None:
    db = SessionLocal()
    try:
        suggestion = suggest_meeting_times(
            SchedulingStore(db),
            participant_ids=participant_ids,
            duration_minutes=duration,
            earliest_start=earliest,
            latest_start=latest,
            required_capacity=capacity,
        )

        if not suggestion.time_slots:
            print("[suggest_times] No available slot in that window")

        for slot in suggestion.time_slots:
            room = slot.room.name if slot.room else "-"
            print(
                f"[suggest_times] {slot.start_time.isoformat()} - "
                f"{slot.end_time.isoformat()}  room={room}  score={slot.score}"
            )

        for p in suggestion.participants:
            for event in p.conflicts:
                print(
                    f"[suggest_times] user {p.user_id} busy: {event.title} "
                    f"({event.start_time.isoformat()} - {event.end_time.isoformat()})"
                )
    finally:
        db.close()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--participant",
        type=int,
        action="append",
        required=True,
        help="Participant user id (repeat for each participant)",
    )
    parser.add_argument("--duration", type=int, required=True, help="Minutes")
    parser.add_argument(
        "--earliest",
        type=datetime.fromisoformat,
        required=True,
        help="Earliest start (ISO, UTC if no offset)",
    )
    parser.add_argument(
        "--latest",
        type=datetime.fromisoformat,
        required=True,
        help="Latest start, exclusive (ISO, UTC if no offset)",
    )
    parser.add_argument(
        "--capacity",
        type=int,
        default=0,
        help="Minimum room capacity",
    )
    args = parser.parse_args()
    run_once(
        participant_ids=args.participant,
        duration=args.duration,
        earliest=args.earliest,
        latest=args.latest,
        capacity=args.capacity,
    )


if __name__ == "__main__":
    main()
