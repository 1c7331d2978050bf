from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Sequence

from ..domain.errors import NothingToUndoError, SlotNotFoundError, SlotTakenError, SlotUnavailableError
from ..domain.history import HistoryEntry
from ..domain.pricing import PriceBreakdown, compute_price
from ..domain.repositories import SlotRepository, SyncStore
from ..domain.services import ensure_run_bookable, index_of, is_past_cutoff
from ..domain.slots import BookingRun, Customer, Slot, collect_runs, generate_week_slots
from ..models import SlotFilter
from ..utils.time import now_local
from . import views
from .history import HistoryLedger
from .promos import PromoRegistry, normalize_code

logger = logging.getLogger(__name__)

SLOTS_KEY = "slots"


@dataclass(frozen=True)
class BookingReceipt:
    entry: HistoryEntry
    price: PriceBreakdown
    run: BookingRun


def _sort_key(slot: Slot) -> tuple[date, int]:
    return slot.date, slot.start_hour


class BookingEngine:
    """
    Owns the slot collection and the undo log for one session.

    Every mutating operation validates fully before writing, then flushes the
    changed slots to the slot repository and republishes the snapshot to the
    sync store. Staff-only operations are guarded by the HTTP layer.
    """

    def __init__(
        self,
        slot_repo: SlotRepository,
        ledger: HistoryLedger,
        promos: PromoRegistry,
        sync_store: SyncStore,
        *,
        payment_delay_seconds: float = 3.0,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        self.slot_repo = slot_repo
        self.ledger = ledger
        self.promos = promos
        self.sync_store = sync_store
        self.payment_delay_seconds = payment_delay_seconds
        self._clock = clock
        self._slots: List[Slot] = []
        self._undo: List[Slot] = []

    @property
    def slots(self) -> tuple[Slot, ...]:
        return tuple(self._slots)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    async def load(self) -> None:
        """Take the slot snapshot from the sync store, else from the repository, else seed a fresh week."""
        cached = await self.sync_store.load(SLOTS_KEY, default=None)
        if cached:
            self._slots = sorted((Slot.from_dict(item) for item in cached), key=_sort_key)
            return

        slots = await self.slot_repo.list_all()
        known = {slot.id for slot in slots}
        missing = [slot for slot in generate_week_slots(self._clock().date()) if slot.id not in known]
        if missing:
            logger.info("seeding %d slots for the coming week", len(missing))
            await self.slot_repo.upsert_many(missing)
        self._slots = sorted([*slots, *missing], key=_sort_key)
        await self._publish()

    def now(self) -> datetime:
        return self._clock()

    def get_slot(self, slot_id: str) -> Slot:
        return self._slots[index_of(self._slots, slot_id)]

    def select_slot(self, slot_id: str, duration: int) -> Slot:
        return self._ensure_bookable(slot_id, duration)

    async def quote(
        self,
        *,
        duration: int,
        members: int,
        mobile: str,
        promo_code: Optional[str] = None,
    ) -> PriceBreakdown:
        promo_discount = self.promos.lookup(promo_code) if promo_code else 0
        booking_count = await self.ledger.count_for_customer(mobile) + 1
        return compute_price(members, duration, booking_count, promo_discount)

    async def confirm_booking(
        self,
        slot_id: str,
        duration: int,
        customer: Customer,
        members: int,
        promo_code: Optional[str] = None,
    ) -> BookingReceipt:
        await self._reconcile(self.get_slot(slot_id).date)
        start = index_of(self._slots, slot_id)
        day = self._slots[start].date
        if any(slot.is_booked and slot.date == day for slot in self._slots[start : start + max(duration, 1)]):
            raise SlotTakenError(f"slot {slot_id} was booked by someone else")
        self._ensure_bookable(slot_id, duration)
        price = await self.quote(duration=duration, members=members, mobile=customer.mobile, promo_code=promo_code)

        booked = [
            slot.booked(customer, members=members, duration=duration)
            for slot in self._slots[start : start + duration]
        ]
        await self._commit(booked)
        entry = await self.ledger.append(
            customer=customer,
            slot_date=booked[0].date,
            start_hour=booked[0].start_hour,
            duration=duration,
            members=members,
            price=price,
            promo_code=normalize_code(promo_code) if promo_code else None,
        )
        return BookingReceipt(entry=entry, price=price, run=BookingRun(slots=tuple(booked)))

    async def pay_and_confirm(
        self,
        slot_id: str,
        duration: int,
        customer: Customer,
        members: int,
        promo_code: Optional[str] = None,
    ) -> BookingReceipt:
        # Cancelling during the wait leaves every store untouched.
        await asyncio.sleep(self.payment_delay_seconds)
        return await self.confirm_booking(slot_id, duration, customer, members, promo_code)

    async def cancel_booking(self, slot_id: str) -> BookingRun:
        run = self._run_containing(slot_id)
        self._undo.append(run.first)
        freed = [slot.cleared() for slot in run.slots]
        await self._commit(freed)
        return BookingRun(slots=tuple(freed))

    async def toggle_holiday(self, slot_id: str, title: str) -> Slot:
        slot = self.get_slot(slot_id)
        self._undo.append(slot)
        updated = slot.cleared() if slot.is_holiday else slot.as_holiday(title)
        await self._commit([updated])
        return updated

    async def block_day(self, day: date, title: str) -> List[Slot]:
        day_slots = self._day(day)
        self._undo.extend(day_slots)
        blocked = [slot.as_day_blocked(title) for slot in day_slots]
        await self._commit(blocked)
        return blocked

    async def mark_holiday(self, day: date, title: str) -> List[Slot]:
        day_slots = self._day(day)
        self._undo.extend(day_slots)
        marked = [slot.as_holiday(title) for slot in day_slots]
        await self.slot_repo.mark_holiday(day, title)
        self._replace(marked)
        await self._publish()
        return marked

    async def undo(self) -> Slot:
        if not self._undo:
            raise NothingToUndoError("nothing to undo")
        snapshot = self._undo.pop()
        await self._commit([snapshot])
        return snapshot

    def filtered_slots(self, day: date, slot_filter: SlotFilter, now: Optional[datetime] = None) -> List[Slot]:
        return views.filtered_slots(self._slots, day, slot_filter, now or self._clock())

    def grouped_slots(
        self, day: date, slot_filter: SlotFilter, now: Optional[datetime] = None
    ) -> List[BookingRun | Slot]:
        return views.grouped_slots(self._slots, day, slot_filter, now or self._clock())

    def current_active_slot(self, now: Optional[datetime] = None) -> BookingRun | None:
        return views.current_active_slot(self._slots, now or self._clock())

    def upcoming_slots(self, count: int, now: Optional[datetime] = None) -> List[BookingRun]:
        return views.upcoming_slots(self._slots, now or self._clock(), count)

    def remaining_time(self, run: BookingRun, now: Optional[datetime] = None) -> str:
        return views.remaining_time(run, now or self._clock())

    def _ensure_bookable(self, slot_id: str, duration: int) -> Slot:
        start = ensure_run_bookable(self._slots, slot_id, duration)
        if is_past_cutoff(start, self._clock()):
            raise SlotUnavailableError(f"slot {slot_id} has already started or is about to")
        return start

    def _day(self, day: date) -> List[Slot]:
        day_slots = views.slots_for_date(self._slots, day)
        if not day_slots:
            raise SlotNotFoundError(f"no slots recorded for {day.isoformat()}")
        return day_slots

    def _run_containing(self, slot_id: str) -> BookingRun:
        slot = self.get_slot(slot_id)
        for item in collect_runs(views.slots_for_date(self._slots, slot.date)):
            if isinstance(item, BookingRun) and any(member.id == slot_id for member in item.slots):
                return item
        raise SlotUnavailableError(f"slot {slot_id} is not booked")

    async def _reconcile(self, day: date) -> None:
        """Pull the stored slots for `day` over the in-memory ones; the stored copy wins."""
        changed = False
        for stored in await self.slot_repo.list_for_date(day):
            try:
                index = index_of(self._slots, stored.id)
            except SlotNotFoundError:
                self._slots.append(stored)
                changed = True
                continue
            if self._slots[index] != stored:
                logger.warning("slot %s changed in the store; keeping the stored copy (last write wins)", stored.id)
                self._slots[index] = stored
                changed = True
        if changed:
            self._slots.sort(key=_sort_key)
            await self._publish()

    async def _commit(self, changed: Sequence[Slot]) -> None:
        await self.slot_repo.upsert_many(changed)
        self._replace(changed)
        await self._publish()

    def _replace(self, changed: Iterable[Slot]) -> None:
        for slot in changed:
            self._slots[index_of(self._slots, slot.id)] = slot

    async def _publish(self) -> None:
        await self.sync_store.put(SLOTS_KEY, [slot.to_dict() for slot in self._slots])
