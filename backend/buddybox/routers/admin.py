from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status

from ..deps import get_engine, require_admin
from ..domain.errors import (
    DuplicatePromoCodeError,
    NothingToUndoError,
    PromoNotFoundError,
    SlotNotFoundError,
    SlotUnavailableError,
)
from ..models import SlotStatus
from ..schemas import PromoDiscount, PromoRead, PromoWrite, ReceiptRead, SlotRead, TitlePayload
from ..usecases.engine import BookingEngine
from ..usecases.promos import normalize_code
from ..utils.audit_log import AuditAction, emit_audit_log

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _audit(
    *,
    action: AuditAction,
    slot_id: Optional[str] = None,
    slot_date: Optional[str] = None,
    status_from: Optional[SlotStatus] = None,
    status_to: Optional[SlotStatus] = None,
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    try:
        emit_audit_log(
            action=action,
            initiator="staff",
            slot_id=slot_id,
            slot_date=slot_date,
            status_from=status_from,
            status_to=status_to,
            message=message,
            extra=extra,
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")


@router.post("/slots/{slot_id}/cancel", response_model=List[SlotRead])
async def cancel_booking(
    slot_id: str = Path(..., min_length=1),
    engine: BookingEngine = Depends(get_engine),
) -> list[SlotRead]:
    try:
        run = await engine.cancel_booking(slot_id)
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    except SlotUnavailableError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="slot is not booked")
    _audit(
        action="booking.cancelled",
        slot_id=run.first.id,
        slot_date=run.date.isoformat(),
        status_from=SlotStatus.BOOKED,
        status_to=SlotStatus.FREE,
        extra={"duration": run.duration},
    )
    return [SlotRead.from_domain(slot=slot) for slot in run.slots]


@router.post("/slots/{slot_id}/holiday", response_model=SlotRead)
async def toggle_holiday(
    payload: TitlePayload,
    slot_id: str = Path(..., min_length=1),
    engine: BookingEngine = Depends(get_engine),
) -> SlotRead:
    try:
        previous = engine.get_slot(slot_id)
        slot = await engine.toggle_holiday(slot_id, payload.title)
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    _audit(
        action="slot.holiday_toggled",
        slot_id=slot.id,
        slot_date=slot.date.isoformat(),
        status_from=previous.status,
        status_to=slot.status,
    )
    return SlotRead.from_domain(slot=slot)


@router.post("/days/{day}/block", response_model=List[SlotRead])
async def block_day(
    payload: TitlePayload,
    day: date,
    engine: BookingEngine = Depends(get_engine),
) -> list[SlotRead]:
    try:
        slots = await engine.block_day(day, payload.title)
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no slots for that date")
    _audit(action="day.blocked", slot_date=day.isoformat(), status_to=SlotStatus.DAY_BLOCKED, message=payload.title)
    return [SlotRead.from_domain(slot=slot) for slot in slots]


@router.post("/days/{day}/holiday", response_model=List[SlotRead])
async def mark_holiday(
    payload: TitlePayload,
    day: date,
    engine: BookingEngine = Depends(get_engine),
) -> list[SlotRead]:
    try:
        slots = await engine.mark_holiday(day, payload.title)
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no slots for that date")
    _audit(action="day.holiday_marked", slot_date=day.isoformat(), status_to=SlotStatus.HOLIDAY, message=payload.title)
    return [SlotRead.from_domain(slot=slot) for slot in slots]


@router.post("/undo", response_model=SlotRead)
async def undo(engine: BookingEngine = Depends(get_engine)) -> SlotRead:
    try:
        slot = await engine.undo()
    except NothingToUndoError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="nothing to undo")
    _audit(action="slot.undo_applied", slot_id=slot.id, slot_date=slot.date.isoformat(), status_to=slot.status)
    return SlotRead.from_domain(slot=slot)


@router.get("/promos", response_model=List[PromoRead])
async def list_promos(engine: BookingEngine = Depends(get_engine)) -> list[PromoRead]:
    return [PromoRead(code=code, discount=discount) for code, discount in engine.promos.list_all().items()]


@router.post("/promos", response_model=PromoRead, status_code=status.HTTP_201_CREATED)
async def create_promo(payload: PromoWrite, engine: BookingEngine = Depends(get_engine)) -> PromoRead:
    try:
        await engine.promos.add_or_update(payload.code, payload.discount)
    except DuplicatePromoCodeError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="promo code already exists")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    code = normalize_code(payload.code)
    _audit(action="promo.saved", extra={"code": code, "discount": payload.discount})
    return PromoRead(code=code, discount=payload.discount)


@router.put("/promos/{code}", response_model=PromoRead)
async def update_promo(
    payload: PromoDiscount,
    code: str = Path(..., min_length=1),
    engine: BookingEngine = Depends(get_engine),
) -> PromoRead:
    try:
        await engine.promos.add_or_update(code, payload.discount, edit=True)
    except PromoNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="promo code not found")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    code = normalize_code(code)
    _audit(action="promo.saved", extra={"code": code, "discount": payload.discount})
    return PromoRead(code=code, discount=payload.discount)


@router.delete("/promos/{code}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_promo(
    code: str = Path(..., min_length=1),
    engine: BookingEngine = Depends(get_engine),
) -> Response:
    await engine.promos.remove(code)
    _audit(action="promo.removed", extra={"code": normalize_code(code)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/history", response_model=List[ReceiptRead])
async def list_history(engine: BookingEngine = Depends(get_engine)) -> list[ReceiptRead]:
    return [ReceiptRead.from_domain(entry=entry) for entry in await engine.ledger.list_all()]
