import pytest
from buddybox.domain.errors import DuplicatePromoCodeError, PromoNotFoundError
from buddybox.usecases.promos import PromoRegistry


async def _registry(promo_repo) -> PromoRegistry:
    registry = PromoRegistry(promo_repo)
    await registry.load()
    return registry


@pytest.mark.asyncio
async def test_add_and_lookup_normalizes_codes(promo_repo) -> None:
    registry = await _registry(promo_repo)

    await registry.add_or_update(" weekend ", 15)

    assert registry.lookup("WEEKEND") == 15
    assert registry.lookup("weekend") == 15
    assert promo_repo.codes["WEEKEND"] == 15


@pytest.mark.asyncio
async def test_duplicate_code_is_rejected_and_registry_unchanged(promo_repo) -> None:
    registry = await _registry(promo_repo)
    before = registry.list_all()

    with pytest.raises(DuplicatePromoCodeError):
        await registry.add_or_update("summer10", 50)

    assert registry.list_all() == before
    assert promo_repo.codes == {"SUMMER10": 10}


@pytest.mark.asyncio
async def test_edit_existing_code(promo_repo) -> None:
    registry = await _registry(promo_repo)

    await registry.add_or_update("SUMMER10", 12, edit=True)

    assert registry.lookup("SUMMER10") == 12
    with pytest.raises(PromoNotFoundError):
        await registry.add_or_update("MISSING", 5, edit=True)


@pytest.mark.asyncio
@pytest.mark.parametrize("discount", [0, 101, -5, True])
async def test_rejects_invalid_discount(promo_repo, discount) -> None:
    registry = await _registry(promo_repo)
    with pytest.raises(ValueError):
        await registry.add_or_update("NEWCODE", discount)
    assert "NEWCODE" not in registry.list_all()


@pytest.mark.asyncio
async def test_remove_is_safe_for_missing_codes(promo_repo) -> None:
    registry = await _registry(promo_repo)

    await registry.remove("nothing-here")
    await registry.remove("summer10")

    assert registry.list_all() == {}
    assert promo_repo.codes == {}
    with pytest.raises(PromoNotFoundError):
        registry.lookup("SUMMER10")
