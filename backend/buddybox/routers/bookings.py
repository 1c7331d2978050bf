from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..config import Settings, get_settings
from ..deps import get_engine
from ..domain.errors import (
    DurationExceededError,
    InvalidDurationError,
    InvalidPartySizeError,
    PromoNotFoundError,
    QrGenerationFailedError,
    SlotNotFoundError,
    SlotTakenError,
    SlotUnavailableError,
)
from ..domain.services import max_duration_from
from ..domain.slots import Customer
from ..infrastructure.qr import build_payment_uri, render_payment_qr
from ..models import SlotStatus
from ..schemas import BookingConfirm, BookingQuote, BookingQuoteRequest, PriceRead, ReceiptRead, SlotSelect, SlotSelection
from ..usecases.engine import BookingEngine
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="", tags=["bookings"])

PAYMENT_NOTE = "Buddy Box slot booking"


def _duration_exceeded(exc: DurationExceededError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": str(exc), "max_duration": exc.max_duration},
    )


@router.post("/bookings/select", response_model=SlotSelection)
async def select_slot(
    payload: SlotSelect,
    engine: BookingEngine = Depends(get_engine),
) -> SlotSelection:
    try:
        slot = engine.select_slot(payload.slot_id, payload.duration)
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    except DurationExceededError as exc:
        raise _duration_exceeded(exc)
    except SlotUnavailableError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="slot not available")
    return SlotSelection(
        slot_id=slot.id,
        duration=payload.duration,
        max_duration=max_duration_from(slot.start_hour),
    )


@router.post("/bookings/quote", response_model=BookingQuote)
async def quote_booking(
    payload: BookingQuoteRequest,
    engine: BookingEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
) -> BookingQuote:
    try:
        price = await engine.quote(
            duration=payload.duration,
            members=payload.members,
            mobile=payload.mobile,
            promo_code=payload.promo_code,
        )
    except (InvalidPartySizeError, InvalidDurationError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except PromoNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="promo code not found")
    payment_uri = build_payment_uri(
        payee=settings.upi_payee,
        payee_name=settings.upi_payee_name,
        amount=price.final_price,
        note=PAYMENT_NOTE,
    )
    return BookingQuote(price=PriceRead.from_domain(price=price), payment_uri=payment_uri)


@router.post("/bookings/confirm", response_model=ReceiptRead, status_code=status.HTTP_201_CREATED)
async def confirm_booking(
    payload: BookingConfirm,
    engine: BookingEngine = Depends(get_engine),
) -> ReceiptRead:
    customer = Customer(name=payload.name, mobile=payload.mobile)
    try:
        receipt = await engine.pay_and_confirm(
            payload.slot_id,
            payload.duration,
            customer,
            payload.members,
            payload.promo_code,
        )
    except SlotNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    except PromoNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="promo code not found")
    except DurationExceededError as exc:
        raise _duration_exceeded(exc)
    except (InvalidPartySizeError, InvalidDurationError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except SlotTakenError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="slot already taken, please pick another")
    except SlotUnavailableError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="slot not available")

    try:
        emit_audit_log(
            action="booking.confirmed",
            initiator="customer",
            slot_id=receipt.run.first.id,
            slot_date=receipt.run.date.isoformat(),
            transaction_id=receipt.entry.transaction_id,
            mobile=receipt.entry.mobile,
            status_from=SlotStatus.FREE,
            status_to=SlotStatus.BOOKED,
            extra={"duration": receipt.run.duration, "final_price": receipt.price.final_price},
        )
    except RuntimeError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")
    return ReceiptRead.from_domain(entry=receipt.entry)


@router.get("/payments/qr", response_class=Response)
async def payment_qr(
    amount: int = Query(..., ge=1),
    note: str = Query(default=PAYMENT_NOTE, max_length=80),
    settings: Settings = Depends(get_settings),
) -> Response:
    uri = build_payment_uri(payee=settings.upi_payee, payee_name=settings.upi_payee_name, amount=amount, note=note)
    try:
        image = render_payment_qr(uri)
    except QrGenerationFailedError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="could not generate payment code, retry")
    return Response(content=image, media_type="image/png")
