from datetime import datetime
from typing import Sequence

from .errors import DurationExceededError, SlotNotFoundError, SlotUnavailableError
from .slots import CLOSING_HOUR, Slot

CUTOFF_MINUTE = 10


def max_duration_from(start_hour: int) -> int:
    """Longest booking that still ends by closing time."""
    if start_hour >= CLOSING_HOUR - 1:
        return 1
    return CLOSING_HOUR - start_hour


def index_of(slots: Sequence[Slot], slot_id: str) -> int:
    for index, slot in enumerate(slots):
        if slot.id == slot_id:
            return index
    raise SlotNotFoundError(f"slot {slot_id} not found")


def can_book_run(slots: Sequence[Slot], start_slot_id: str, duration: int) -> bool:
    """True if `duration` consecutive slots from the start slot are all free on the same day."""
    if duration < 1:
        return False
    try:
        start = index_of(slots, start_slot_id)
    except SlotNotFoundError:
        return False
    run = slots[start : start + duration]
    if len(run) != duration:
        return False
    first = run[0]
    return all(slot.date == first.date and slot.is_free for slot in run)


def ensure_run_bookable(slots: Sequence[Slot], start_slot_id: str, duration: int) -> Slot:
    """
    Pure validation: the run must end by closing time and every slot in it must be free.
    Returns the start slot if OK. Raises domain errors otherwise.
    """
    start = slots[index_of(slots, start_slot_id)]
    max_duration = max_duration_from(start.start_hour)
    if duration > max_duration:
        raise DurationExceededError(max_duration)
    if not can_book_run(slots, start_slot_id, duration):
        raise SlotUnavailableError(f"slot {start_slot_id} is not available for {duration}h")
    return start


def is_past_cutoff(slot: Slot, now: datetime) -> bool:
    today = now.date()
    if slot.date > today:
        return False
    if slot.date < today:
        return True
    first_open_hour = now.hour + (1 if now.minute >= CUTOFF_MINUTE else 0)
    return slot.start_hour < first_open_hour
