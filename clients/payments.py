"""
Payment screen view model.

Loads the booking summary, collects a payment method (card, PayPal or
wallet), validates card fields locally, waits a short simulated
processing delay and posts the confirmation to the backend. The backend's
answer decides the outcome; there is no payment gateway.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import httpx

from clients.notifications import Toaster
from clients.session import USER_TOKEN_KEY, SessionStore, build_http_client, failure_message, request_envelope
from common.models import PaymentMethod

logger = logging.getLogger(__name__)

PROCESSING_DELAY_SECONDS = 1.5
LOGIN_PATH = "/login"
BOOKINGS_PATH = "/mybookings"

# ASCII digits only; fullmatch so a trailing newline is not accepted
_EXPIRY_PATTERN = re.compile(r"[0-9]{2}/[0-9]{2}")
_CVV_PATTERN = re.compile(r"[0-9]{3}")
_WHITESPACE = re.compile(r"\s")


class PaymentState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    VALIDATING = "validating"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


@dataclass
class CardDetails:
    card_number: str = ""
    card_name: str = ""
    expiry_date: str = ""
    cvv: str = ""

    @property
    def digits(self) -> str:
        return _WHITESPACE.sub("", self.card_number)


def card_validation_error(card: CardDetails) -> Optional[str]:
    """Return the first problem with ``card``, or ``None`` when it is acceptable."""

    if len(card.digits) != 16:
        return "Please enter a valid 16-digit card number"
    if not card.card_name.strip():
        return "Please enter the cardholder name"
    if not _EXPIRY_PATTERN.fullmatch(card.expiry_date):
        return "Please enter expiry date in MM/YY format"
    if not _CVV_PATTERN.fullmatch(card.cvv):
        return "Please enter a valid 3-digit CVV"
    return None


def format_amount(value: Any) -> str:
    """Render a booking amount the way the web client prints numbers (``55`` not ``55.0``)."""

    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class BookingSummary:
    cook: str
    date: str
    time: str
    amount: str


class PaymentView:
    """Drives one payment screen for ``booking_id``."""

    def __init__(
        self,
        client: httpx.Client,
        booking_id: Any,
        token: Optional[str],
        toaster: Optional[Toaster] = None,
        currency_symbol: str = "$",
        processing_delay: float = PROCESSING_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.booking_id = booking_id
        self.token = token
        self.toaster = toaster or Toaster()
        self.currency_symbol = currency_symbol
        self.processing_delay = processing_delay
        self._sleep = sleep

        self.state = PaymentState.LOADING
        self.booking: Optional[Dict[str, Any]] = None
        self.payment_method = PaymentMethod.CARD
        self.card = CardDetails()
        self.processing_payment = False
        self.location: Optional[str] = None
        self.last_outcome: Optional[PaymentState] = None

    @classmethod
    def from_session(
        cls,
        store: SessionStore,
        booking_id: Any,
        client: Optional[httpx.Client] = None,
        **kwargs: Any,
    ) -> PaymentView:
        """Open the screen for the logged-in user kept in ``store``."""

        return cls(client or build_http_client(), booking_id, store.get(USER_TOKEN_KEY), **kwargs)

    def navigate(self, path: str) -> None:
        self.location = path

    def load(self) -> None:
        if not self.token:
            self.toaster.error("Please login to view booking details")
            self.navigate(LOGIN_PATH)
            return

        self.state = PaymentState.LOADING
        fallback = "Failed to fetch booking details"
        try:
            data = request_envelope(self.client, "GET", f"/api/user/booking/{self.booking_id}", self.token)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching booking details for %s: %s", self.booking_id, exc)
            self._abandon(failure_message(exc, fallback))
            return

        if data.get("success"):
            self.booking = data.get("booking")
            self.state = PaymentState.READY
        else:
            self._abandon(data.get("message") or fallback)

    def _abandon(self, message: str) -> None:
        self.booking = None
        self.state = PaymentState.ERROR
        self.toaster.error(message)
        self.navigate(BOOKINGS_PATH)

    def select_method(self, method: str | PaymentMethod) -> None:
        self.payment_method = PaymentMethod(method)

    def update_card(self, **fields: str) -> None:
        for name, value in fields.items():
            if not hasattr(self.card, name):
                raise AttributeError(f"Unknown card field: {name}")
            setattr(self.card, name, value)

    def validate_card_details(self) -> bool:
        error = card_validation_error(self.card)
        if error:
            self.toaster.error(error)
            return False
        return True

    def _payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"bookingId": self.booking_id, "paymentMethod": self.payment_method.value}
        if self.payment_method == PaymentMethod.CARD:
            payload["lastFourDigits"] = self.card.digits[-4:]
        return payload

    def process_payment(self) -> bool:
        """Run one payment attempt; returns ``True`` once the backend accepts it."""

        if self.processing_payment or self.state != PaymentState.READY:
            return False
        if self.payment_method == PaymentMethod.CARD:
            self.state = PaymentState.VALIDATING
            valid = self.validate_card_details()
            self.state = PaymentState.READY
            if not valid:
                return False

        self.processing_payment = True
        self.state = PaymentState.PROCESSING
        self.last_outcome = None
        try:
            self._sleep(self.processing_delay)
            data = request_envelope(self.client, "POST", "/api/user/process-payment", self.token, json=self._payload())
            if data.get("success"):
                self.toaster.success(data.get("message") or "Payment successful!")
                self.state = PaymentState.DONE
                self.last_outcome = PaymentState.DONE
                self.navigate(BOOKINGS_PATH)
                return True
            self.toaster.error(data.get("message") or "Payment failed")
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error processing payment for booking %s: %s", self.booking_id, exc)
            self.toaster.error(failure_message(exc, "Payment processing failed"))
        finally:
            self.processing_payment = False

        self.last_outcome = PaymentState.ERROR
        self.state = PaymentState.READY
        return False

    def summary(self) -> Optional[BookingSummary]:
        if self.booking is None:
            return None
        return BookingSummary(
            cook=str(self.booking.get("cookName", "")),
            date=str(self.booking.get("bookingDate", "")),
            time=str(self.booking.get("bookingTime", "")),
            amount=f"{self.currency_symbol}{format_amount(self.booking.get('amount', ''))}",
        )

    def back_to_booking(self) -> None:
        if self.booking is not None:
            self.navigate(f"/bookings/{self.booking.get('cookId')}")
