import json
import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from common import auth
from common.bookings import booking_detail, cancel_booking, create_booking, get_booking_or_404, record_payment
from common.database import get_db
from common.dependencies import get_current_user
from common.errors import APIError
from common.media import CloudinaryStorage, get_storage
from common.models import Booking, Cook, PaymentMethod, RoleEnum, User
from common.rate_limit import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from common.schemas import (
    Address,
    BookCookRequest,
    BookingIdRequest,
    BookingRead,
    LoginRequest,
    PaymentRequest,
    RegisterRequest,
    UserRead,
)
from services.backend.routers.cook import invalidate_cook_list

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


def _own_booking(db: Session, booking_id: int, user: User) -> Booking:
    booking = get_booking_or_404(db, booking_id)
    if booking.user_id != user.id:
        raise APIError("Access denied", 403)
    return booking


@router.post("/register")
@limiter.limit(REGISTER_LIMIT)
def register_user(request: Request, user_in: RegisterRequest, db: Session = Depends(get_db)) -> dict:
    if db.query(User).filter(User.email == user_in.email).first():
        raise APIError("User already exists", 409)
    user = User(
        name=user_in.name,
        email=user_in.email,
        hashed_password=auth.get_password_hash(user_in.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return {"success": True, "token": auth.create_session_token(user.id, RoleEnum.USER)}


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
def login_user(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)) -> dict:
    user = auth.authenticate(db, User, credentials.email, credentials.password)
    if not user:
        raise APIError("Invalid credentials", 401)
    return {"success": True, "token": auth.create_session_token(user.id, RoleEnum.USER)}


@router.get("/get-profile")
def get_profile(user: User = Depends(get_current_user)) -> dict:
    return {"success": True, "userData": UserRead.model_validate(user).to_payload()}


@router.post("/update-profile")
def update_profile(
    name: str = Form(...),
    phone: str = Form(...),
    address: str = Form("{}"),
    dob: str = Form(...),
    gender: str = Form(...),
    image: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: CloudinaryStorage = Depends(get_storage),
) -> dict:
    if not all(value.strip() for value in (name, phone, dob, gender)):
        raise APIError("Data missing")
    try:
        parsed_address = Address.model_validate(json.loads(address or "{}"))
    except ValueError as exc:
        raise APIError("Address must be a JSON object") from exc

    user.name = name
    user.phone = phone
    user.dob = dob
    user.gender = gender
    user.address = parsed_address.model_dump()
    if image is not None:
        user.image = storage.upload_image(image.file, image.content_type, "users", size=image.size)
    db.commit()
    return {"success": True, "message": "Profile updated"}


@router.post("/book-cook")
def book_cook(
    body: BookCookRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    cook = db.get(Cook, body.cook_id)
    if cook is None:
        raise APIError("Cook not found", 404)
    booking = create_booking(db, user, cook, body.slot_date, body.slot_time)
    invalidate_cook_list()
    return {"success": True, "message": "Booking created", "bookingId": booking.id}


@router.get("/bookings")
def list_bookings(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    bookings = (
        db.query(Booking)
        .filter(Booking.user_id == user.id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )
    return {"success": True, "bookings": [BookingRead.model_validate(b).to_payload() for b in bookings]}


@router.get("/booking/{booking_id}")
def get_booking(booking_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    booking = _own_booking(db, booking_id, user)
    return {"success": True, "booking": booking_detail(booking).to_payload()}


@router.post("/cancel-booking")
def cancel_user_booking(
    body: BookingIdRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    booking = _own_booking(db, body.booking_id, user)
    cancel_booking(db, booking, cancelled_by=f"user:{user.id}")
    invalidate_cook_list()
    return {"success": True, "message": "Booking cancelled"}


@router.post("/process-payment")
def process_payment(
    body: PaymentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    booking = _own_booking(db, body.booking_id, user)
    if body.payment_method == PaymentMethod.CARD and not body.last_four_digits:
        raise APIError("Card payments require the last four digits")
    record_payment(db, booking, body.payment_method, body.last_four_digits)
    return {
        "success": True,
        "message": "Payment successful",
        "booking": booking_detail(booking).to_payload(),
    }
