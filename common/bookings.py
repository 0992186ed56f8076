"""Booking lifecycle operations shared by the admin, cook and user routers."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import status
from sqlalchemy import update
from sqlalchemy.orm import Session

from .errors import APIError
from .models import Booking, BookingStatus, Cook, PaymentMethod, User
from .schemas import BookingDetail

logger = logging.getLogger(__name__)


def cook_snapshot(cook: Cook) -> dict[str, Any]:
    return {
        "name": cook.name,
        "image": cook.image,
        "cuisine": cook.cuisine,
        "experience": cook.experience,
        "fees": cook.fees,
        "address": dict(cook.address or {}),
    }


def user_snapshot(user: User) -> dict[str, Any]:
    return {
        "name": user.name,
        "email": user.email,
        "image": user.image,
        "phone": user.phone,
        "dob": user.dob,
    }


def get_booking_or_404(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise APIError("Booking not found", status.HTTP_404_NOT_FOUND)
    return booking


def reserve_slot(cook: Cook, slot_date: str, slot_time: str) -> None:
    booked = {day: list(times) for day, times in (cook.slots_booked or {}).items()}
    if slot_time in booked.get(slot_date, []):
        raise APIError("Slot not available", status.HTTP_409_CONFLICT)
    booked.setdefault(slot_date, []).append(slot_time)
    cook.slots_booked = booked


def release_slot(cook: Cook, slot_date: str, slot_time: str) -> None:
    booked = {day: list(times) for day, times in (cook.slots_booked or {}).items()}
    times = [t for t in booked.get(slot_date, []) if t != slot_time]
    if times:
        booked[slot_date] = times
    else:
        booked.pop(slot_date, None)
    cook.slots_booked = booked


def create_booking(db: Session, user: User, cook: Cook, slot_date: str, slot_time: str) -> Booking:
    if not cook.available:
        raise APIError("Cook not available")
    reserve_slot(cook, slot_date, slot_time)
    booking = Booking(
        user_id=user.id,
        cook_id=cook.id,
        slot_date=slot_date,
        slot_time=slot_time,
        amount=cook.fees,
        user_data=user_snapshot(user),
        cook_data=cook_snapshot(cook),
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s created: user=%s cook=%s slot=%s %s", booking.id, user.id, cook.id, slot_date, slot_time)
    return booking


def cancel_booking(db: Session, booking: Booking, cancelled_by: str) -> Booking:
    if booking.status == BookingStatus.CANCELLED:
        raise APIError("Booking already cancelled")
    if booking.status == BookingStatus.COMPLETED:
        raise APIError("Completed bookings cannot be cancelled")
    booking.status = BookingStatus.CANCELLED
    cook = db.get(Cook, booking.cook_id)
    if cook is not None:
        release_slot(cook, booking.slot_date, booking.slot_time)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s cancelled by %s", booking.id, cancelled_by)
    return booking


def complete_booking(db: Session, booking: Booking) -> Booking:
    if booking.status == BookingStatus.CANCELLED:
        raise APIError("Cancelled bookings cannot be completed")
    if booking.status == BookingStatus.COMPLETED:
        raise APIError("Booking already completed")
    booking.status = BookingStatus.COMPLETED
    db.commit()
    db.refresh(booking)
    return booking


def record_payment(
    db: Session,
    booking: Booking,
    method: PaymentMethod,
    last_four_digits: Optional[str] = None,
) -> Booking:
    """
    Move a pending booking to paid.

    The status change is a single conditional UPDATE so that two
    submissions racing each other cannot both succeed.
    """
    if booking.status == BookingStatus.PAID:
        raise APIError("Booking already paid", status.HTTP_409_CONFLICT)
    if booking.status != BookingStatus.PENDING:
        raise APIError(f"Cannot pay for a {booking.status.value} booking")

    result = db.execute(
        update(Booking)
        .where(Booking.id == booking.id, Booking.status == BookingStatus.PENDING)
        .values(
            status=BookingStatus.PAID,
            payment_method=method,
            last_four_digits=last_four_digits if method == PaymentMethod.CARD else None,
            paid_at=datetime.utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount == 0:
        raise APIError("Booking already paid", status.HTTP_409_CONFLICT)
    db.refresh(booking)
    logger.info("Booking %s paid via %s", booking.id, method.value)
    return booking


def booking_detail(booking: Booking) -> BookingDetail:
    cook_data = booking.cook_data or {}
    return BookingDetail(
        id=booking.id,
        cook_id=booking.cook_id,
        cook_name=cook_data.get("name", ""),
        cook_image=cook_data.get("image", ""),
        booking_date=booking.slot_date,
        booking_time=booking.slot_time,
        amount=booking.amount,
        status=booking.status,
        payment_method=booking.payment_method,
    )
