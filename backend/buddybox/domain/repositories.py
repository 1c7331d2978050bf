from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Protocol

from .history import HistoryEntry
from .slots import Slot


class SlotRepository(Protocol):
    async def list_for_date(self, slot_date: date) -> list[Slot]: ...

    async def list_all(self) -> list[Slot]: ...

    async def upsert(self, slot: Slot) -> None: ...

    async def upsert_many(self, slots: Iterable[Slot]) -> None: ...

    async def mark_holiday(self, slot_date: date, title: str) -> list[Slot]: ...


class PromoRepository(Protocol):
    async def list_all(self) -> dict[str, int]: ...

    async def save(self, code: str, discount: int) -> None: ...

    async def delete(self, code: str) -> None: ...


class HistoryRepository(Protocol):
    async def add(self, entry: HistoryEntry) -> HistoryEntry: ...

    async def list_all(self) -> list[HistoryEntry]: ...

    async def count_for_mobile(self, mobile: str) -> int: ...


class SyncStore(Protocol):
    async def put(self, key: str, value: Any) -> None: ...

    async def get(self, key: str) -> Any: ...

    async def load(self, key: str, default: Any) -> Any: ...
