from datetime import date, timedelta

from buddybox.domain.slots import BookingRun, Customer, Slot, collect_runs, generate_week_slots
from buddybox.models import SlotStatus

REFERENCE = date(2026, 10, 19)
CUSTOMER = Customer(name="Asha", mobile="9000000001")


def test_generate_week_covers_seven_days_of_opening_hours() -> None:
    slots = generate_week_slots(REFERENCE)

    assert len(slots) == 7 * 19
    assert len({slot.id for slot in slots}) == len(slots)
    for offset in range(7):
        day = REFERENCE + timedelta(days=offset)
        hours = [slot.start_hour for slot in slots if slot.date == day]
        assert hours == list(range(5, 24))
    assert [(s.date, s.start_hour) for s in slots] == sorted((s.date, s.start_hour) for s in slots)
    assert all(slot.status == SlotStatus.FREE for slot in slots)


def test_slot_ids_and_end_hours() -> None:
    slot = Slot.free(REFERENCE, 23)
    assert slot.id == "2026-10-19-23"
    assert slot.end_hour == 0
    assert Slot.free(REFERENCE, 5).end_hour == 6


def test_state_changes_clear_other_states() -> None:
    slot = Slot.free(REFERENCE, 10).booked(CUSTOMER, members=6, duration=3)
    assert slot.status == SlotStatus.BOOKED
    assert (slot.name, slot.mobile, slot.members, slot.duration) == ("Asha", "9000000001", 6, 3)

    holiday = slot.as_holiday("Diwali")
    assert holiday.status == SlotStatus.HOLIDAY
    assert holiday.name is None and holiday.duration is None and not holiday.is_booked

    blocked = holiday.as_day_blocked("Tournament")
    assert blocked.status == SlotStatus.DAY_BLOCKED
    assert not blocked.is_holiday and blocked.holiday_title is None

    assert blocked.cleared() == Slot.free(REFERENCE, 10)


def test_slot_dict_round_trip() -> None:
    slot = Slot.free(REFERENCE, 7).booked(CUSTOMER, members=12, duration=1)
    data = slot.to_dict()
    assert data["date"] == "2026-10-19"
    assert Slot.from_dict(data) == slot


def test_collect_runs_folds_each_booking() -> None:
    slots = generate_week_slots(REFERENCE)[:19]
    other = Customer(name="Ravi", mobile="9000000002")
    # 10-12 by Asha, then a back-to-back 12-13 booking by the same customer, 15-16 by Ravi.
    slots[5:7] = [s.booked(CUSTOMER, members=6, duration=2) for s in slots[5:7]]
    slots[7] = slots[7].booked(CUSTOMER, members=6, duration=1)
    slots[10] = slots[10].booked(other, members=12, duration=1)

    items = collect_runs(slots)
    runs = [item for item in items if isinstance(item, BookingRun)]

    assert [(run.start_hour, run.end_hour) for run in runs] == [(10, 12), (12, 13), (15, 16)]
    assert len(items) == 19 - 1
    assert runs[2].first.name == "Ravi"


def test_collect_runs_stops_at_a_different_booking() -> None:
    slots = generate_week_slots(REFERENCE)[:19]
    other = Customer(name="Ravi", mobile="9000000002")
    # Asha's 10-13 booking lost its first hour; Ravi holds 13-14 right after it.
    slots[6:8] = [s.booked(CUSTOMER, members=6, duration=3) for s in slots[6:8]]
    slots[8] = slots[8].booked(other, members=6, duration=1)

    runs = [item for item in collect_runs(slots) if isinstance(item, BookingRun)]

    assert [(run.first.name, run.start_hour, run.duration) for run in runs] == [("Asha", 11, 2), ("Ravi", 13, 1)]
