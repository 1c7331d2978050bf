from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query

from ..deps import get_engine
from ..models import SlotFilter
from ..schemas import SlotCard, SlotRead
from ..usecases.engine import BookingEngine

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("", response_model=List[SlotRead])
async def list_slots(
    day: date = Query(..., alias="date", description="Venue-local date (YYYY-MM-DD)"),
    slot_filter: SlotFilter = Query(default=SlotFilter.ALL, alias="filter"),
    engine: BookingEngine = Depends(get_engine),
) -> list[SlotRead]:
    return [SlotRead.from_domain(slot=slot) for slot in engine.filtered_slots(day, slot_filter)]


@router.get("/grouped", response_model=List[SlotCard])
async def list_slot_cards(
    day: date = Query(..., alias="date", description="Venue-local date (YYYY-MM-DD)"),
    slot_filter: SlotFilter = Query(default=SlotFilter.ALL, alias="filter"),
    engine: BookingEngine = Depends(get_engine),
) -> list[SlotCard]:
    return [SlotCard.from_domain(item=item) for item in engine.grouped_slots(day, slot_filter)]
