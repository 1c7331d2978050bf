from datetime import date, datetime
from typing import Callable, List, Optional

from ..domain.history import HistoryEntry, generate_transaction_id
from ..domain.pricing import PriceBreakdown
from ..domain.repositories import HistoryRepository
from ..domain.slots import Customer
from ..utils.time import now_local


class HistoryLedger:
    """Append-only record of completed bookings; drives receipts and loyalty counts."""

    def __init__(self, repo: HistoryRepository, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.repo = repo
        self._clock = clock or now_local

    async def append(
        self,
        *,
        customer: Customer,
        slot_date: date,
        start_hour: int,
        duration: int,
        members: int,
        price: PriceBreakdown,
        promo_code: Optional[str] = None,
    ) -> HistoryEntry:
        created_at = self._clock()
        entry = HistoryEntry(
            transaction_id=generate_transaction_id(created_at),
            name=customer.name,
            mobile=customer.mobile,
            date=slot_date,
            start_hour=start_hour,
            duration=duration,
            members=members,
            base_rate=price.base_rate,
            subtotal=price.subtotal,
            final_price=price.final_price,
            created_at=created_at,
            promo_code=promo_code,
            promo_discount=price.promo_discount,
            loyalty_discount=price.loyalty_discount,
        )
        return await self.repo.add(entry)

    async def list_all(self) -> List[HistoryEntry]:
        return await self.repo.list_all()

    async def count_for_customer(self, mobile: str) -> int:
        return await self.repo.count_for_mobile(mobile)
