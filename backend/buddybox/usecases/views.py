from datetime import date, datetime, timedelta
from typing import List, Sequence

from ..domain.services import is_past_cutoff
from ..domain.slots import BookingRun, Slot, collect_runs
from ..models import SlotFilter


def slots_for_date(slots: Sequence[Slot], day: date) -> List[Slot]:
    return sorted((slot for slot in slots if slot.date == day), key=lambda slot: slot.start_hour)


def _matches(slot: Slot, slot_filter: SlotFilter) -> bool:
    if slot_filter == SlotFilter.AVAILABLE:
        return slot.is_free
    if slot_filter == SlotFilter.BOOKED:
        return slot.is_booked
    return True


def filtered_slots(slots: Sequence[Slot], day: date, slot_filter: SlotFilter, now: datetime) -> List[Slot]:
    return [
        slot
        for slot in slots_for_date(slots, day)
        if not is_past_cutoff(slot, now) and _matches(slot, slot_filter)
    ]


def grouped_slots(
    slots: Sequence[Slot],
    day: date,
    slot_filter: SlotFilter,
    now: datetime,
) -> List[BookingRun | Slot]:
    """One card per free/holiday/blocked slot and one per booking run, keyed by its first slot."""
    items: List[BookingRun | Slot] = []
    for item in collect_runs(slots_for_date(slots, day)):
        head = item.first if isinstance(item, BookingRun) else item
        if is_past_cutoff(head, now) or not _matches(head, slot_filter):
            continue
        items.append(item)
    return items


def booking_runs(slots: Sequence[Slot], day: date) -> List[BookingRun]:
    return [item for item in collect_runs(slots_for_date(slots, day)) if isinstance(item, BookingRun)]


def current_active_slot(slots: Sequence[Slot], now: datetime) -> BookingRun | None:
    for run in booking_runs(slots, now.date()):
        if run.start_hour <= now.hour < run.end_hour:
            return run
    return None


def upcoming_slots(slots: Sequence[Slot], now: datetime, count: int) -> List[BookingRun]:
    today = now.date()
    later_today = [run for run in booking_runs(slots, today) if run.start_hour > now.hour]
    tomorrow = booking_runs(slots, today + timedelta(days=1))
    return (later_today + tomorrow)[: max(count, 0)]


def remaining_time(run: BookingRun, now: datetime) -> str:
    ends_at = datetime.combine(run.date, datetime.min.time()) + timedelta(hours=run.end_hour)
    minutes = max(int((ends_at - now).total_seconds()) // 60, 0)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}"
