"""Pydantic schemas for request bodies and response payloads.

Field names are snake_case in Python and camelCase on the wire, matching
what the browser clients send and read.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from .models import BookingStatus, PaymentMethod


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Address(CamelModel):
    line1: str = ""
    line2: str = ""


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)


class CookCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    cuisine: str = Field(..., min_length=1)
    experience: str = Field(..., min_length=1)
    about: str = Field(..., min_length=1)
    fees: float = Field(..., gt=0)
    address: Address = Field(default_factory=Address)


class CookIdRequest(CamelModel):
    cook_id: int


class BookingIdRequest(CamelModel):
    booking_id: int


class CookProfileUpdate(CamelModel):
    fees: Optional[float] = Field(None, gt=0)
    address: Optional[Address] = None
    available: Optional[bool] = None
    about: Optional[str] = None


class BookCookRequest(CamelModel):
    cook_id: int
    slot_date: str = Field(..., pattern=r"^\d{1,2}_\d{1,2}_\d{4}$")
    slot_time: str = Field(..., min_length=1, max_length=20)


class PaymentRequest(CamelModel):
    booking_id: int
    payment_method: PaymentMethod
    last_four_digits: Optional[str] = Field(None, pattern=r"^\d{4}$")


class CookPublic(CamelModel):
    id: int
    name: str
    image: str
    cuisine: str
    experience: str
    about: str
    fees: float
    address: Address
    available: bool
    slots_booked: dict[str, list[str]]


class CookRead(CookPublic):
    email: str
    created_at: datetime


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    image: str
    phone: str
    address: Address
    gender: str
    dob: str


class BookingRead(CamelModel):
    id: int
    user_id: int
    cook_id: int
    slot_date: str
    slot_time: str
    amount: float
    user_data: dict
    cook_data: dict
    status: BookingStatus
    payment_method: Optional[PaymentMethod] = None
    last_four_digits: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime


class BookingDetail(CamelModel):
    """Flattened booking view consumed by the payment screen."""

    id: int
    cook_id: int
    cook_name: str
    cook_image: str
    booking_date: str
    booking_time: str
    amount: float
    status: BookingStatus
    payment_method: Optional[PaymentMethod] = None
