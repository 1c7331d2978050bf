from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


def generate_transaction_id(created_at: datetime) -> str:
    """Millisecond timestamp plus a random suffix; collisions are treated as negligible."""
    return f"TXN{int(created_at.timestamp() * 1000)}{secrets.token_hex(3).upper()}"


@dataclass(frozen=True)
class HistoryEntry:
    transaction_id: str
    name: str
    mobile: str
    date: date
    start_hour: int
    duration: int
    members: int
    base_rate: int
    subtotal: int
    final_price: int
    created_at: datetime
    promo_code: Optional[str] = None
    promo_discount: int = 0
    loyalty_discount: int = 0

    @property
    def end_hour(self) -> int:
        return self.start_hour + self.duration
