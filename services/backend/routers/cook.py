import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from common import auth
from common.bookings import cancel_booking, complete_booking, get_booking_or_404
from common.cache import SimpleTTLCache
from common.config import get_settings
from common.database import get_db
from common.dependencies import get_current_cook
from common.errors import APIError
from common.models import Booking, BookingStatus, Cook, RoleEnum
from common.rate_limit import LOGIN_LIMIT, limiter
from common.schemas import BookingIdRequest, BookingRead, CookProfileUpdate, CookPublic, CookRead, LoginRequest

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/cook", tags=["cook"])

COOK_LIST_KEY = "cooks:public"
cook_list_cache: SimpleTTLCache[list[dict]] = SimpleTTLCache(ttl=settings.cook_list_cache_ttl)


def invalidate_cook_list() -> None:
    cook_list_cache.pop(COOK_LIST_KEY)


def _own_booking(db: Session, booking_id: int, cook: Cook) -> Booking:
    booking = get_booking_or_404(db, booking_id)
    if booking.cook_id != cook.id:
        raise APIError("Access denied", 403)
    return booking


@router.get("/list")
def cook_list(db: Session = Depends(get_db)) -> dict:
    def load() -> list[dict]:
        cooks = db.query(Cook).order_by(Cook.created_at.desc()).all()
        return [CookPublic.model_validate(cook).to_payload() for cook in cooks]

    return {"success": True, "cooks": cook_list_cache.get_or_set(COOK_LIST_KEY, load)}


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
def login_cook(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)) -> dict:
    cook = auth.authenticate(db, Cook, credentials.email, credentials.password)
    if not cook:
        raise APIError("Invalid credentials", 401)
    return {"success": True, "token": auth.create_session_token(cook.id, RoleEnum.COOK)}


@router.get("/bookings")
def cook_bookings(cook: Cook = Depends(get_current_cook), db: Session = Depends(get_db)) -> dict:
    bookings = db.query(Booking).filter(Booking.cook_id == cook.id).order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    return {"success": True, "bookings": [BookingRead.model_validate(b).to_payload() for b in bookings]}


@router.post("/complete-booking")
def complete_cook_booking(
    body: BookingIdRequest,
    cook: Cook = Depends(get_current_cook),
    db: Session = Depends(get_db),
) -> dict:
    booking = _own_booking(db, body.booking_id, cook)
    complete_booking(db, booking)
    return {"success": True, "message": "Booking completed"}


@router.post("/cancel-booking")
def cancel_cook_booking(
    body: BookingIdRequest,
    cook: Cook = Depends(get_current_cook),
    db: Session = Depends(get_db),
) -> dict:
    booking = _own_booking(db, body.booking_id, cook)
    cancel_booking(db, booking, cancelled_by=f"cook:{cook.id}")
    invalidate_cook_list()
    return {"success": True, "message": "Booking cancelled"}


@router.get("/dashboard")
def cook_dashboard(cook: Cook = Depends(get_current_cook), db: Session = Depends(get_db)) -> dict:
    bookings = db.query(Booking).filter(Booking.cook_id == cook.id).order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    earnings = sum(b.amount for b in bookings if b.status in {BookingStatus.PAID, BookingStatus.COMPLETED})
    dash_data = {
        "earnings": earnings,
        "bookings": len(bookings),
        "clients": len({b.user_id for b in bookings}),
        "latestBookings": [BookingRead.model_validate(b).to_payload() for b in bookings[:5]],
    }
    return {"success": True, "dashData": dash_data}


@router.get("/profile")
def cook_profile(cook: Cook = Depends(get_current_cook)) -> dict:
    return {"success": True, "profileData": CookRead.model_validate(cook).to_payload()}


@router.post("/update-profile")
def update_cook_profile(
    body: CookProfileUpdate,
    cook: Cook = Depends(get_current_cook),
    db: Session = Depends(get_db),
) -> dict:
    data = body.model_dump(exclude_unset=True)
    if data.get("address") is not None:
        data["address"] = body.address.model_dump()
    for key, value in data.items():
        if value is not None:
            setattr(cook, key, value)
    db.commit()
    invalidate_cook_list()
    logger.info("Cook %s updated profile fields %s", cook.id, sorted(data))
    return {"success": True, "message": "Profile updated"}
