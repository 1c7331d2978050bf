from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .domain.history import HistoryEntry
from .domain.pricing import PriceBreakdown
from .domain.slots import BookingRun, Slot
from .models import SlotStatus


class SlotRead(BaseModel):
    slot_id: str
    slot_date: date
    start_hour: int
    end_hour: int
    status: SlotStatus
    name: Optional[str] = None
    mobile: Optional[str] = None
    members: Optional[int] = None
    duration: Optional[int] = None
    holiday_title: Optional[str] = None
    day_block_title: Optional[str] = None

    @classmethod
    def from_domain(cls, *, slot: Slot) -> "SlotRead":
        return cls(
            slot_id=slot.id,
            slot_date=slot.date,
            start_hour=slot.start_hour,
            end_hour=slot.end_hour,
            status=slot.status,
            name=slot.name,
            mobile=slot.mobile,
            members=slot.members,
            duration=slot.duration,
            holiday_title=slot.holiday_title,
            day_block_title=slot.day_block_title,
        )


class SlotCard(BaseModel):
    slot_id: str
    slot_date: date
    start_hour: int
    end_hour: int
    status: SlotStatus
    duration: int = 1
    name: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_domain(cls, *, item: BookingRun | Slot) -> "SlotCard":
        if isinstance(item, BookingRun):
            return cls(
                slot_id=item.first.id,
                slot_date=item.date,
                start_hour=item.start_hour,
                end_hour=item.end_hour,
                status=SlotStatus.BOOKED,
                duration=item.duration,
                name=item.first.name,
            )
        return cls(
            slot_id=item.id,
            slot_date=item.date,
            start_hour=item.start_hour,
            end_hour=item.start_hour + 1,
            status=item.status,
            title=item.holiday_title or item.day_block_title,
        )


class DisplaySession(BaseModel):
    slot_id: str
    slot_date: date
    name: Optional[str]
    start_hour: int
    end_hour: int
    remaining: Optional[str] = None

    @classmethod
    def from_domain(cls, *, run: BookingRun, remaining: Optional[str] = None) -> "DisplaySession":
        return cls(
            slot_id=run.first.id,
            slot_date=run.date,
            name=run.first.name,
            start_hour=run.start_hour,
            end_hour=run.end_hour,
            remaining=remaining,
        )


class DisplayBoard(BaseModel):
    now: datetime
    current: Optional[DisplaySession]
    upcoming: List[DisplaySession]


class SlotSelect(BaseModel):
    slot_id: str
    duration: int = Field(ge=1)


class SlotSelection(BaseModel):
    slot_id: str
    duration: int
    max_duration: int


class BookingQuoteRequest(BaseModel):
    duration: int = Field(ge=1)
    members: int = Field(ge=1)
    mobile: str = Field(min_length=1, max_length=32)
    promo_code: Optional[str] = None


class PriceRead(BaseModel):
    base_rate: int
    subtotal: int
    final_price: int
    duration_discount: int
    duration_discount_label: str
    promo_discount: int
    loyalty_discount: int

    @classmethod
    def from_domain(cls, *, price: PriceBreakdown) -> "PriceRead":
        return cls(
            base_rate=price.base_rate,
            subtotal=price.subtotal,
            final_price=price.final_price,
            duration_discount=price.duration_discount,
            duration_discount_label=price.duration_discount_label,
            promo_discount=price.promo_discount,
            loyalty_discount=price.loyalty_discount,
        )


class BookingQuote(BaseModel):
    price: PriceRead
    payment_uri: str


class BookingConfirm(BaseModel):
    slot_id: str
    duration: int = Field(ge=1)
    name: str = Field(min_length=1, max_length=255)
    mobile: str = Field(min_length=1, max_length=32)
    members: int = Field(ge=1)
    promo_code: Optional[str] = None

    @field_validator("name", "mobile")
    @classmethod
    def _strip(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class ReceiptRead(BaseModel):
    transaction_id: str
    name: str
    mobile: str
    slot_date: date
    start_hour: int
    end_hour: int
    duration: int
    members: int
    base_rate: int
    subtotal: int
    final_price: int
    promo_code: Optional[str]
    promo_discount: int
    loyalty_discount: int
    created_at: datetime

    @classmethod
    def from_domain(cls, *, entry: HistoryEntry) -> "ReceiptRead":
        return cls(
            transaction_id=entry.transaction_id,
            name=entry.name,
            mobile=entry.mobile,
            slot_date=entry.date,
            start_hour=entry.start_hour,
            end_hour=entry.end_hour,
            duration=entry.duration,
            members=entry.members,
            base_rate=entry.base_rate,
            subtotal=entry.subtotal,
            final_price=entry.final_price,
            promo_code=entry.promo_code,
            promo_discount=entry.promo_discount,
            loyalty_discount=entry.loyalty_discount,
            created_at=entry.created_at,
        )


class AdminLogin(BaseModel):
    password: str


class AdminToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TitlePayload(BaseModel):
    title: str = Field(default="Holiday", min_length=1, max_length=255)


class PromoWrite(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    discount: int = Field(gt=0, le=100)


class PromoDiscount(BaseModel):
    discount: int = Field(gt=0, le=100)


class PromoRead(BaseModel):
    code: str
    discount: int
