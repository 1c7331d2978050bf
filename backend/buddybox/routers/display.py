from fastapi import APIRouter, Depends, Query

from ..deps import get_engine
from ..schemas import DisplayBoard, DisplaySession
from ..usecases.engine import BookingEngine

router = APIRouter(prefix="/display", tags=["display"])


@router.get("/board", response_model=DisplayBoard)
async def display_board(
    upcoming: int = Query(default=3, ge=0, le=20),
    engine: BookingEngine = Depends(get_engine),
) -> DisplayBoard:
    now = engine.now()
    current = engine.current_active_slot(now)
    return DisplayBoard(
        now=now,
        current=(
            DisplaySession.from_domain(run=current, remaining=engine.remaining_time(current, now))
            if current is not None
            else None
        ),
        upcoming=[DisplaySession.from_domain(run=run) for run in engine.upcoming_slots(upcoming, now)],
    )
