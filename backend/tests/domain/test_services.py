from datetime import date, datetime

import pytest
from buddybox.domain.errors import DurationExceededError, SlotNotFoundError, SlotUnavailableError
from buddybox.domain.services import can_book_run, ensure_run_bookable, is_past_cutoff, max_duration_from
from buddybox.domain.slots import Customer, Slot, generate_week_slots

REFERENCE = date(2026, 10, 19)
CUSTOMER = Customer(name="Asha", mobile="9000000001")


def _week() -> list[Slot]:
    return generate_week_slots(REFERENCE)


def _position(slots: list[Slot], slot_id: str) -> int:
    return next(index for index, slot in enumerate(slots) if slot.id == slot_id)


def test_max_duration_from_closing_time() -> None:
    assert max_duration_from(23) == 1
    assert max_duration_from(22) == 2
    assert max_duration_from(5) == 19
    assert max_duration_from(0) == 24


def test_can_book_free_run() -> None:
    assert can_book_run(_week(), "2026-10-19-10", 3) is True


@pytest.mark.parametrize(
    "change",
    [
        lambda s: s.booked(CUSTOMER, members=6, duration=1),
        lambda s: s.as_holiday("Holi"),
        lambda s: s.as_day_blocked("Maintenance"),
    ],
)
def test_cannot_book_run_touching_unavailable_slot(change) -> None:
    slots = _week()
    index = _position(slots, "2026-10-19-11")
    slots[index] = change(slots[index])
    assert can_book_run(slots, "2026-10-19-10", 3) is False
    assert can_book_run(slots, "2026-10-19-12", 3) is True


def test_cannot_book_run_crossing_midnight_or_past_the_week() -> None:
    slots = _week()
    assert can_book_run(slots, "2026-10-19-23", 2) is False
    assert can_book_run(slots, "2026-10-25-23", 2) is False
    assert can_book_run(slots, "2026-10-25-23", 1) is True


def test_can_book_run_rejects_unknown_slot_and_empty_duration() -> None:
    assert can_book_run(_week(), "2026-11-30-10", 1) is False
    assert can_book_run(_week(), "2026-10-19-10", 0) is False


def test_ensure_run_bookable_reports_clamped_maximum() -> None:
    with pytest.raises(DurationExceededError) as excinfo:
        ensure_run_bookable(_week(), "2026-10-19-22", 3)
    assert excinfo.value.max_duration == 2
    assert "Max hours available: 2 hrs" in str(excinfo.value)


def test_ensure_run_bookable_rejects_taken_run() -> None:
    slots = _week()
    index = _position(slots, "2026-10-19-12")
    slots[index] = slots[index].booked(CUSTOMER, members=6, duration=1)
    with pytest.raises(SlotUnavailableError):
        ensure_run_bookable(slots, "2026-10-19-11", 3)
    assert ensure_run_bookable(slots, "2026-10-19-13", 3).id == "2026-10-19-13"


def test_ensure_run_bookable_unknown_slot() -> None:
    with pytest.raises(SlotNotFoundError):
        ensure_run_bookable(_week(), "nope", 1)


def test_cutoff_rounds_up_after_ten_minutes() -> None:
    slot = Slot.free(REFERENCE, 8)
    assert is_past_cutoff(slot, datetime(2026, 10, 19, 8, 9)) is False
    assert is_past_cutoff(slot, datetime(2026, 10, 19, 8, 10)) is True
    assert is_past_cutoff(Slot.free(REFERENCE, 7), datetime(2026, 10, 19, 8, 0)) is True


def test_cutoff_never_applies_to_future_days() -> None:
    late_evening = datetime(2026, 10, 19, 23, 55)
    assert is_past_cutoff(Slot.free(date(2026, 10, 20), 5), late_evening) is False
    assert is_past_cutoff(Slot.free(date(2026, 10, 18), 23), late_evening) is True
