from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import date, timedelta
from typing import Any, Optional

from ..models import SlotStatus

OPENING_HOUR = 5
CLOSING_HOUR = 24
DAYS_PER_WEEK = 7


def make_slot_id(slot_date: date, hour: int) -> str:
    return f"{slot_date.isoformat()}-{hour}"


@dataclass(frozen=True)
class Customer:
    name: str
    mobile: str


@dataclass(frozen=True)
class Slot:
    id: str
    date: date
    start_hour: int
    end_hour: int
    is_booked: bool = False
    name: Optional[str] = None
    mobile: Optional[str] = None
    members: Optional[int] = None
    duration: Optional[int] = None
    is_holiday: bool = False
    holiday_title: Optional[str] = None
    is_day_blocked: bool = False
    day_block_title: Optional[str] = None

    @classmethod
    def free(cls, slot_date: date, hour: int) -> "Slot":
        return cls(
            id=make_slot_id(slot_date, hour),
            date=slot_date,
            start_hour=hour,
            end_hour=(hour + 1) % 24,
        )

    @property
    def status(self) -> SlotStatus:
        if self.is_booked:
            return SlotStatus.BOOKED
        if self.is_holiday:
            return SlotStatus.HOLIDAY
        if self.is_day_blocked:
            return SlotStatus.DAY_BLOCKED
        return SlotStatus.FREE

    @property
    def is_free(self) -> bool:
        return self.status == SlotStatus.FREE

    def cleared(self) -> "Slot":
        return Slot.free(self.date, self.start_hour)

    def booked(self, customer: Customer, *, members: int, duration: int) -> "Slot":
        return replace(
            self.cleared(),
            is_booked=True,
            name=customer.name,
            mobile=customer.mobile,
            members=members,
            duration=duration,
        )

    def as_holiday(self, title: str) -> "Slot":
        return replace(self.cleared(), is_holiday=True, holiday_title=title)

    def as_day_blocked(self, title: str) -> "Slot":
        return replace(self.cleared(), is_day_blocked=True, day_block_title=title)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Slot":
        return cls(**{**data, "date": date.fromisoformat(data["date"])})


@dataclass(frozen=True)
class BookingRun:
    """A booked slot together with the trailing slots its duration covers."""

    slots: tuple[Slot, ...]

    @property
    def first(self) -> Slot:
        return self.slots[0]

    @property
    def date(self) -> date:
        return self.first.date

    @property
    def start_hour(self) -> int:
        return self.first.start_hour

    @property
    def duration(self) -> int:
        return len(self.slots)

    @property
    def end_hour(self) -> int:
        return self.start_hour + self.duration


def generate_week_slots(reference_date: date) -> list[Slot]:
    return [
        Slot.free(reference_date + timedelta(days=offset), hour)
        for offset in range(DAYS_PER_WEEK)
        for hour in range(OPENING_HOUR, CLOSING_HOUR)
    ]


def _same_booking(head: Slot, follower: Slot) -> bool:
    return (
        follower.is_booked
        and follower.date == head.date
        and (follower.name, follower.mobile, follower.members, follower.duration)
        == (head.name, head.mobile, head.members, head.duration)
    )


def collect_runs(day_slots: list[Slot]) -> list[BookingRun | Slot]:
    """Walk one day's slots in hour order, folding each booking into a single run.

    A booked slot opens a run covering up to its stored duration. A follower
    joins only while it carries the same booking, so hours freed or rebooked
    in between split the run. Unbooked slots pass through unchanged.
    """
    items: list[BookingRun | Slot] = []
    index = 0
    while index < len(day_slots):
        slot = day_slots[index]
        if not slot.is_booked:
            items.append(slot)
            index += 1
            continue
        length = max(slot.duration or 1, 1)
        covered = [slot]
        for follower in day_slots[index + 1 : index + length]:
            if not _same_booking(slot, follower):
                break
            covered.append(follower)
        items.append(BookingRun(slots=tuple(covered)))
        index += len(covered)
    return items
