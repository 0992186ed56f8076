import json
import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from common import auth
from common.bookings import cancel_booking, get_booking_or_404
from common.database import get_db
from common.dependencies import get_current_admin
from common.errors import APIError
from common.media import CloudinaryStorage, get_storage
from common.models import Admin, Booking, Cook, RoleEnum, User
from common.rate_limit import LOGIN_LIMIT, limiter
from common.schemas import BookingIdRequest, BookingRead, CookCreate, CookIdRequest, CookRead, LoginRequest
from services.backend.routers.cook import invalidate_cook_list

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
def login_admin(request: Request, credentials: LoginRequest, db: Session = Depends(get_db)) -> dict:
    admin = auth.authenticate(db, Admin, credentials.email, credentials.password)
    if not admin:
        raise APIError("Invalid credentials", 401)
    return {"success": True, "token": auth.create_session_token(admin.id, RoleEnum.ADMIN)}


@router.post("/add-cook")
def add_cook(
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    cuisine: str = Form(...),
    experience: str = Form(...),
    about: str = Form(...),
    fees: str = Form(...),
    address: str = Form("{}"),
    image: UploadFile | None = File(None),
    _: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: CloudinaryStorage = Depends(get_storage),
) -> dict:
    if image is None:
        raise APIError("Image not selected")
    try:
        cook_in = CookCreate(
            name=name,
            email=email,
            password=password,
            cuisine=cuisine,
            experience=experience,
            about=about,
            fees=fees,
            address=json.loads(address or "{}"),
        )
    except json.JSONDecodeError as exc:
        raise APIError("Address must be a JSON object") from exc
    except ValidationError as exc:
        first = exc.errors()[0]
        raise APIError(f"{'.'.join(str(p) for p in first['loc'])}: {first['msg']}") from exc

    if db.query(Cook).filter(Cook.email == cook_in.email).first():
        raise APIError("A cook with this email already exists", 409)

    image_url = storage.upload_image(image.file, image.content_type, "cooks", size=image.size)
    cook = Cook(
        name=cook_in.name,
        email=cook_in.email,
        hashed_password=auth.get_password_hash(cook_in.password),
        image=image_url,
        cuisine=cook_in.cuisine,
        experience=cook_in.experience,
        about=cook_in.about,
        fees=cook_in.fees,
        address=cook_in.address.model_dump(),
    )
    db.add(cook)
    db.commit()
    invalidate_cook_list()
    logger.info("Cook %s added (%s)", cook.id, cook.email)
    return {"success": True, "message": "Cook added"}


@router.get("/all-cooks")
def all_cooks(_: Admin = Depends(get_current_admin), db: Session = Depends(get_db)) -> dict:
    cooks = db.query(Cook).order_by(Cook.created_at.desc()).all()
    return {"success": True, "cooks": [CookRead.model_validate(cook).to_payload() for cook in cooks]}


@router.post("/change-availability")
def change_availability(
    body: CookIdRequest,
    _: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> dict:
    cook = db.get(Cook, body.cook_id)
    if cook is None:
        raise APIError("Cook not found", 404)
    cook.available = not cook.available
    db.commit()
    invalidate_cook_list()
    return {"success": True, "message": "Availability changed"}


@router.delete("/cook/{cook_id}")
def delete_cook(cook_id: int, _: Admin = Depends(get_current_admin), db: Session = Depends(get_db)) -> dict:
    cook = db.get(Cook, cook_id)
    if cook is None:
        raise APIError("Cook not found", 404)
    active = (
        db.query(Booking)
        .filter(Booking.cook_id == cook_id, Booking.status.in_(Booking.ACTIVE_STATUSES))
        .first()
    )
    if active:
        raise APIError("Cook has active bookings", 409)
    db.query(Booking).filter(Booking.cook_id == cook_id).delete(synchronize_session=False)
    db.delete(cook)
    db.commit()
    invalidate_cook_list()
    logger.info("Cook %s deleted", cook_id)
    return {"success": True, "message": "Cook deleted"}


@router.get("/bookings")
def all_bookings(_: Admin = Depends(get_current_admin), db: Session = Depends(get_db)) -> dict:
    bookings = db.query(Booking).order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    return {"success": True, "bookings": [BookingRead.model_validate(b).to_payload() for b in bookings]}


@router.post("/cancel-booking")
def admin_cancel_booking(
    body: BookingIdRequest,
    admin: Admin = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> dict:
    booking = get_booking_or_404(db, body.booking_id)
    cancel_booking(db, booking, cancelled_by=f"admin:{admin.id}")
    invalidate_cook_list()
    return {"success": True, "message": "Booking cancelled"}


@router.get("/dashboard")
def admin_dashboard(_: Admin = Depends(get_current_admin), db: Session = Depends(get_db)) -> dict:
    latest = db.query(Booking).order_by(Booking.created_at.desc(), Booking.id.desc()).limit(5).all()
    dash_data = {
        "cooks": db.query(Cook).count(),
        "bookings": db.query(Booking).count(),
        "clients": db.query(User).count(),
        "latestBookings": [BookingRead.model_validate(b).to_payload() for b in latest],
    }
    return {"success": True, "dashData": dash_data}
