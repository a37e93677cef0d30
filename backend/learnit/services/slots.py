"""
The fixed daily booking template and slot arithmetic.
"""

from datetime import date
from typing import Iterable

TIME_SLOTS: tuple[str, ...] = (
    "9:00 AM",
    "10:00 AM",
    "11:00 AM",
    "12:00 PM",
    "1:00 PM",
    "2:00 PM",
    "3:00 PM",
    "4:00 PM",
)


def free_slots(booked: Iterable[str]) -> list[str]:
    """Template order minus the booked labels."""
    taken = set(booked)
    return [slot for slot in TIME_SLOTS if slot not in taken]


def slot_key(machine_id: str, day: date, time_slot: str) -> str:
    """Stable key for a (machine, date, slot) triple, used by the admission gate."""
    return f"slot:{machine_id}:{day.isoformat()}:{time_slot}"
