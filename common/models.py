"""SQLAlchemy models for admins, cooks, users and bookings."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import Boolean, DateTime, Enum as SqlEnum, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class RoleEnum(str, Enum):
    ADMIN = "admin"
    COOK = "cook"
    USER = "user"


class BookingStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentMethod(str, Enum):
    CARD = "card"
    PAYPAL = "paypal"
    WALLET = "wallet"


def _empty_address() -> dict[str, str]:
    return {"line1": "", "line2": ""}


class Admin(Base):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    image: Mapped[str] = mapped_column(String(500), default="")
    phone: Mapped[str] = mapped_column(String(30), default="000000000")
    address: Mapped[dict[str, Any]] = mapped_column(MutableDict.as_mutable(JSON), default=_empty_address)
    gender: Mapped[str] = mapped_column(String(20), default="Not Selected")
    dob: Mapped[str] = mapped_column(String(20), default="Not Selected")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    bookings: Mapped[List["Booking"]] = relationship(back_populates="user")


class Cook(Base):
    __tablename__ = "cooks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    image: Mapped[str] = mapped_column(String(500))
    cuisine: Mapped[str] = mapped_column(String(100), index=True)
    experience: Mapped[str] = mapped_column(String(50))
    about: Mapped[str] = mapped_column(Text)
    fees: Mapped[float] = mapped_column(Float)
    address: Mapped[dict[str, Any]] = mapped_column(MutableDict.as_mutable(JSON), default=_empty_address)
    available: Mapped[bool] = mapped_column(Boolean, default=True)
    # slot_date -> list of booked slot_time strings
    slots_booked: Mapped[dict[str, list[str]]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    bookings: Mapped[List["Booking"]] = relationship(back_populates="cook")


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    cook_id: Mapped[int] = mapped_column(ForeignKey("cooks.id", ondelete="CASCADE"), index=True)
    slot_date: Mapped[str] = mapped_column(String(20), index=True)
    slot_time: Mapped[str] = mapped_column(String(20))
    amount: Mapped[float] = mapped_column(Float)
    user_data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    cook_data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    status: Mapped[BookingStatus] = mapped_column(SqlEnum(BookingStatus), default=BookingStatus.PENDING, index=True)
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(SqlEnum(PaymentMethod), default=None)
    last_four_digits: Mapped[Optional[str]] = mapped_column(String(4), default=None)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    user: Mapped[User] = relationship(back_populates="bookings")
    cook: Mapped[Cook] = relationship(back_populates="bookings")

    ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.PAID)

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES
