from typing import Dict

from ..domain.errors import DuplicatePromoCodeError, PromoNotFoundError
from ..domain.repositories import PromoRepository


def normalize_code(code: str) -> str:
    return code.strip().upper()


class PromoRegistry:
    """Promo code -> discount percent. Codes are unique; writes go straight to the repository."""

    def __init__(self, repo: PromoRepository) -> None:
        self.repo = repo
        self._codes: Dict[str, int] = {}

    async def load(self) -> None:
        self._codes = dict(await self.repo.list_all())

    def list_all(self) -> Dict[str, int]:
        return dict(self._codes)

    def lookup(self, code: str) -> int:
        key = normalize_code(code)
        if key not in self._codes:
            raise PromoNotFoundError(f"promo code {key} not found")
        return self._codes[key]

    async def add_or_update(self, code: str, discount: int, *, edit: bool = False) -> int:
        key = normalize_code(code)
        if not key:
            raise ValueError("promo code must not be empty")
        if isinstance(discount, bool) or not isinstance(discount, int) or not 0 < discount <= 100:
            raise ValueError("discount must be an integer in (0, 100]")
        exists = key in self._codes
        if exists and not edit:
            raise DuplicatePromoCodeError(f"promo code {key} already exists")
        if edit and not exists:
            raise PromoNotFoundError(f"promo code {key} not found")

        await self.repo.save(key, discount)
        self._codes[key] = discount
        return discount

    async def remove(self, code: str) -> None:
        key = normalize_code(code)
        if key not in self._codes:
            return
        await self.repo.delete(key)
        del self._codes[key]
