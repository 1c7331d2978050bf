from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.sqltypes import BigInteger, Date, DateTime, Integer, String


class Base(DeclarativeBase):
    pass


class SlotStatus(StrEnum):
    FREE = "free"
    BOOKED = "booked"
    HOLIDAY = "holiday"
    DAY_BLOCKED = "day_blocked"


class SlotFilter(StrEnum):
    ALL = "all"
    AVAILABLE = "available"
    BOOKED = "booked"


class SlotRecord(Base):
    __tablename__ = "slots"
    __table_args__ = (
        CheckConstraint("start_hour >= 0 AND start_hour < 24", name="chk_slots_hour"),
        UniqueConstraint("slot_date", "start_hour", name="uq_slots_date_hour"),
        Index("idx_slots_date", "slot_date"),
    )

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    slot_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    end_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    is_booked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    members: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_holiday: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    holiday_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_day_blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    day_block_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)


class PromoCodeRecord(Base):
    __tablename__ = "promo_codes"
    __table_args__ = (CheckConstraint("discount > 0 AND discount <= 100", name="chk_promo_discount"),)

    code: Mapped[str] = mapped_column(String(64), primary_key=True)
    discount: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)


class BookingHistoryRecord(Base):
    __tablename__ = "booking_history"
    __table_args__ = (
        CheckConstraint("duration >= 1", name="chk_history_duration"),
        Index("idx_history_mobile", "mobile"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    transaction_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[str] = mapped_column(String(32), nullable=False)
    slot_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    members: Mapped[int] = mapped_column(Integer, nullable=False)
    base_rate: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False)
    final_price: Mapped[int] = mapped_column(Integer, nullable=False)
    promo_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    promo_discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    loyalty_discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
