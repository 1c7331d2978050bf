from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, List

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..domain.history import HistoryEntry
from ..domain.repositories import HistoryRepository, PromoRepository, SlotRepository
from ..domain.slots import Slot
from ..models import BookingHistoryRecord, PromoCodeRecord, SlotRecord

SessionFactory = async_sessionmaker[AsyncSession]


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _slot_from_row(row: SlotRecord) -> Slot:
    return Slot(
        id=row.id,
        date=row.slot_date,
        start_hour=row.start_hour,
        end_hour=row.end_hour,
        is_booked=row.is_booked,
        name=row.name,
        mobile=row.mobile,
        members=row.members,
        duration=row.duration,
        is_holiday=row.is_holiday,
        holiday_title=row.holiday_title,
        is_day_blocked=row.is_day_blocked,
        day_block_title=row.day_block_title,
    )


def _apply_slot(row: SlotRecord, slot: Slot, now: datetime) -> None:
    row.slot_date = slot.date
    row.start_hour = slot.start_hour
    row.end_hour = slot.end_hour
    row.is_booked = slot.is_booked
    row.name = slot.name
    row.mobile = slot.mobile
    row.members = slot.members
    row.duration = slot.duration
    row.is_holiday = slot.is_holiday
    row.holiday_title = slot.holiday_title
    row.is_day_blocked = slot.is_day_blocked
    row.day_block_title = slot.day_block_title
    row.updated_at = now


class SqlAlchemySlotRepository(SlotRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def list_for_date(self, slot_date: date) -> List[Slot]:
        async with self.session_factory() as session:
            rows = await session.scalars(
                select(SlotRecord).where(SlotRecord.slot_date == slot_date).order_by(SlotRecord.start_hour)
            )
            return [_slot_from_row(row) for row in rows]

    async def list_all(self) -> List[Slot]:
        async with self.session_factory() as session:
            rows = await session.scalars(select(SlotRecord).order_by(SlotRecord.slot_date, SlotRecord.start_hour))
            return [_slot_from_row(row) for row in rows]

    async def upsert(self, slot: Slot) -> None:
        await self.upsert_many([slot])

    async def upsert_many(self, slots: Iterable[Slot]) -> None:
        now = _utc_now_naive()
        async with self.session_factory() as session, session.begin():
            for slot in slots:
                row = await session.get(SlotRecord, slot.id)
                if row is None:
                    row = SlotRecord(id=slot.id)
                    session.add(row)
                _apply_slot(row, slot, now)

    async def mark_holiday(self, slot_date: date, title: str) -> List[Slot]:
        async with self.session_factory() as session, session.begin():
            await session.execute(
                update(SlotRecord)
                .where(SlotRecord.slot_date == slot_date)
                .values(
                    is_booked=False,
                    name=None,
                    mobile=None,
                    members=None,
                    duration=None,
                    is_holiday=True,
                    holiday_title=title,
                    is_day_blocked=False,
                    day_block_title=None,
                    updated_at=_utc_now_naive(),
                )
            )
        return await self.list_for_date(slot_date)


class SqlAlchemyPromoRepository(PromoRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def list_all(self) -> dict[str, int]:
        async with self.session_factory() as session:
            rows = await session.scalars(select(PromoCodeRecord).order_by(PromoCodeRecord.code))
            return {row.code: row.discount for row in rows}

    async def save(self, code: str, discount: int) -> None:
        async with self.session_factory() as session, session.begin():
            row = await session.get(PromoCodeRecord, code)
            if row is None:
                row = PromoCodeRecord(code=code)
                session.add(row)
            row.discount = discount
            row.updated_at = _utc_now_naive()

    async def delete(self, code: str) -> None:
        async with self.session_factory() as session, session.begin():
            await session.execute(delete(PromoCodeRecord).where(PromoCodeRecord.code == code))


def _entry_from_row(row: BookingHistoryRecord) -> HistoryEntry:
    return HistoryEntry(
        transaction_id=row.transaction_id,
        name=row.name,
        mobile=row.mobile,
        date=row.slot_date,
        start_hour=row.start_hour,
        duration=row.duration,
        members=row.members,
        base_rate=row.base_rate,
        subtotal=row.subtotal,
        final_price=row.final_price,
        created_at=row.created_at,
        promo_code=row.promo_code,
        promo_discount=row.promo_discount,
        loyalty_discount=row.loyalty_discount,
    )


class SqlAlchemyHistoryRepository(HistoryRepository):
    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    async def add(self, entry: HistoryEntry) -> HistoryEntry:
        async with self.session_factory() as session, session.begin():
            session.add(
                BookingHistoryRecord(
                    transaction_id=entry.transaction_id,
                    name=entry.name,
                    mobile=entry.mobile,
                    slot_date=entry.date,
                    start_hour=entry.start_hour,
                    duration=entry.duration,
                    members=entry.members,
                    base_rate=entry.base_rate,
                    subtotal=entry.subtotal,
                    final_price=entry.final_price,
                    promo_code=entry.promo_code,
                    promo_discount=entry.promo_discount,
                    loyalty_discount=entry.loyalty_discount,
                    created_at=entry.created_at,
                )
            )
        return entry

    async def list_all(self) -> List[HistoryEntry]:
        async with self.session_factory() as session:
            rows = await session.scalars(select(BookingHistoryRecord).order_by(BookingHistoryRecord.id))
            return [_entry_from_row(row) for row in rows]

    async def count_for_mobile(self, mobile: str) -> int:
        async with self.session_factory() as session:
            stmt = select(func.count(BookingHistoryRecord.id)).where(BookingHistoryRecord.mobile == mobile)
            return int(await session.scalar(stmt) or 0)
