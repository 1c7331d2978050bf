from dataclasses import replace
from datetime import date, datetime
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import pytest
from buddybox.domain.history import HistoryEntry
from buddybox.domain.slots import Slot
from buddybox.infrastructure.sync_store import TimestampedStore
from buddybox.usecases.engine import BookingEngine
from buddybox.usecases.history import HistoryLedger
from buddybox.usecases.promos import PromoRegistry

# Monday morning; the seeded week runs 2026-10-19 .. 2026-10-25.
FIXED_NOW = datetime(2026, 10, 19, 8, 30)


class FakeSlotRepo:
    def __init__(self) -> None:
        self.rows: Dict[str, Slot] = {}
        self.holiday_calls: List[tuple[date, str]] = []

    async def list_for_date(self, slot_date: date) -> List[Slot]:
        return sorted((s for s in self.rows.values() if s.date == slot_date), key=lambda s: s.start_hour)

    async def list_all(self) -> List[Slot]:
        return sorted(self.rows.values(), key=lambda s: (s.date, s.start_hour))

    async def upsert(self, slot: Slot) -> None:
        self.rows[slot.id] = slot

    async def upsert_many(self, slots: Iterable[Slot]) -> None:
        for slot in slots:
            self.rows[slot.id] = slot

    async def mark_holiday(self, slot_date: date, title: str) -> List[Slot]:
        self.holiday_calls.append((slot_date, title))
        for slot in await self.list_for_date(slot_date):
            self.rows[slot.id] = slot.as_holiday(title)
        return await self.list_for_date(slot_date)


class FakePromoRepo:
    def __init__(self, codes: Optional[Dict[str, int]] = None) -> None:
        self.codes: Dict[str, int] = dict(codes or {})

    async def list_all(self) -> Dict[str, int]:
        return dict(self.codes)

    async def save(self, code: str, discount: int) -> None:
        self.codes[code] = discount

    async def delete(self, code: str) -> None:
        self.codes.pop(code, None)


class FakeHistoryRepo:
    def __init__(self) -> None:
        self.entries: List[HistoryEntry] = []

    async def add(self, entry: HistoryEntry) -> HistoryEntry:
        self.entries.append(entry)
        return entry

    async def list_all(self) -> List[HistoryEntry]:
        return list(self.entries)

    async def count_for_mobile(self, mobile: str) -> int:
        return sum(1 for entry in self.entries if entry.mobile == mobile)


class FakeRedis:
    """Just the `redis.asyncio.Redis` calls the sync store makes."""

    def __init__(self) -> None:
        self.values: Dict[str, str] = {}
        self.expiries: Dict[str, int] = {}
        self.closed = False

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def setex(self, key: str, seconds: int, value: str) -> bool:
        self.values[key] = value
        self.expiries[key] = seconds
        return True

    async def aclose(self) -> None:
        self.closed = True


def history_entry(mobile: str, *, transaction_id: str = "TXN1", day: date = date(2026, 10, 1)) -> HistoryEntry:
    return HistoryEntry(
        transaction_id=transaction_id,
        name="Regular",
        mobile=mobile,
        date=day,
        start_hour=10,
        duration=1,
        members=6,
        base_rate=250,
        subtotal=250,
        final_price=250,
        created_at=FIXED_NOW,
    )


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def slot_repo() -> FakeSlotRepo:
    return FakeSlotRepo()


@pytest.fixture
def promo_repo() -> FakePromoRepo:
    return FakePromoRepo({"SUMMER10": 10})


@pytest.fixture
def history_repo() -> FakeHistoryRepo:
    return FakeHistoryRepo()


@pytest.fixture
def regular_history() -> Callable[[str, int], List[HistoryEntry]]:
    def _entries(mobile: str, count: int) -> List[HistoryEntry]:
        return [replace(history_entry(mobile), transaction_id=f"TXN{index}") for index in range(count)]

    return _entries


EngineFactory = Callable[..., Awaitable[BookingEngine]]


@pytest.fixture
def make_engine(slot_repo: FakeSlotRepo, promo_repo: FakePromoRepo, history_repo: FakeHistoryRepo) -> EngineFactory:
    """Build a loaded engine; pass another repo to simulate a second session on the same store."""

    async def _make(
        repo: Optional[FakeSlotRepo] = None,
        *,
        payment_delay_seconds: float = 0,
        clock: Callable[[], datetime] = lambda: FIXED_NOW,
    ) -> BookingEngine:
        promos = PromoRegistry(promo_repo)
        await promos.load()
        engine = BookingEngine(
            repo or slot_repo,
            HistoryLedger(history_repo, clock=clock),
            promos,
            TimestampedStore(FakeRedis(), freshness_seconds=300),
            payment_delay_seconds=payment_delay_seconds,
            clock=clock,
        )
        await engine.load()
        return engine

    return _make
