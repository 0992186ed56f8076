"""
Admin console shell.

The only top-level state is whether an admin token is stored. Without one
the console shows the login form; with one it shows the navigation shell
and whichever view the current path routes to.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Tuple

import httpx

from clients.notifications import Toaster
from clients.session import ADMIN_TOKEN_KEY, SessionStore, failure_message, request_envelope

logger = logging.getLogger(__name__)

SIDEBAR_LINKS: List[Tuple[str, str]] = [
    ("/admin-dashboard", "Dashboard"),
    ("/all-bookings", "Bookings"),
    ("/add-cook", "Add Cook"),
    ("/cook-list", "Cooks List"),
]


class AdminView:
    """Base class for the routed views; each talks to ``/api/admin``."""

    name = "view"

    def __init__(self, console: "AdminConsole") -> None:
        self.console = console

    @property
    def toaster(self) -> Toaster:
        return self.console.toaster

    def _call(self, method: str, url: str, fallback: str, **kwargs: Any) -> Optional[Dict[str, Any]]:
        try:
            data = request_envelope(self.console.client, method, url, self.console.token, **kwargs)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            self.toaster.error(failure_message(exc, fallback))
            return None
        if not data.get("success"):
            self.toaster.error(data.get("message") or fallback)
            return None
        return data

    def load(self) -> None:
        pass

    def cancel_booking(self, booking_id: int) -> bool:
        data = self._call("POST", "/api/admin/cancel-booking", "Failed to cancel booking", json={"bookingId": booking_id})
        if data is None:
            return False
        self.toaster.success(data.get("message") or "Booking cancelled")
        self.load()
        return True


class PlaceholderView(AdminView):
    name = "placeholder"


class DashboardView(AdminView):
    name = "dashboard"

    def __init__(self, console: "AdminConsole") -> None:
        super().__init__(console)
        self.dash_data: Optional[Dict[str, Any]] = None

    def load(self) -> None:
        data = self._call("GET", "/api/admin/dashboard", "Failed to load dashboard")
        if data is not None:
            self.dash_data = data.get("dashData")


class BookingsView(AdminView):
    name = "bookings"

    def __init__(self, console: "AdminConsole") -> None:
        super().__init__(console)
        self.bookings: List[Dict[str, Any]] = []

    def load(self) -> None:
        data = self._call("GET", "/api/admin/bookings", "Failed to load bookings")
        if data is not None:
            self.bookings = data.get("bookings", [])


@dataclass
class CookForm:
    name: str = ""
    email: str = ""
    password: str = ""
    cuisine: str = ""
    experience: str = "1 Year"
    about: str = ""
    fees: str = ""
    address: Dict[str, str] = field(default_factory=lambda: {"line1": "", "line2": ""})
    image: Optional[Tuple[str, BinaryIO, str]] = None


class AddCookView(AdminView):
    name = "add-cook"

    def __init__(self, console: "AdminConsole") -> None:
        super().__init__(console)
        self.form = CookForm()

    def submit(self) -> bool:
        if self.form.image is None:
            self.toaster.error("Image not selected")
            return False
        fields = {
            "name": self.form.name,
            "email": self.form.email,
            "password": self.form.password,
            "cuisine": self.form.cuisine,
            "experience": self.form.experience,
            "about": self.form.about,
            "fees": self.form.fees,
            "address": json.dumps(self.form.address),
        }
        data = self._call("POST", "/api/admin/add-cook", "Failed to add cook", data=fields, files={"image": self.form.image})
        if data is None:
            return False
        self.toaster.success(data.get("message") or "Cook added")
        self.form = CookForm()
        return True


class CooksListView(AdminView):
    name = "cook-list"

    def __init__(self, console: "AdminConsole") -> None:
        super().__init__(console)
        self.cooks: List[Dict[str, Any]] = []

    def load(self) -> None:
        data = self._call("GET", "/api/admin/all-cooks", "Failed to load cooks")
        if data is not None:
            self.cooks = data.get("cooks", [])

    def change_availability(self, cook_id: int) -> bool:
        data = self._call("POST", "/api/admin/change-availability", "Failed to change availability", json={"cookId": cook_id})
        if data is None:
            return False
        self.toaster.success(data.get("message") or "Availability changed")
        self.load()
        return True

    def delete_cook(self, cook_id: int) -> bool:
        data = self._call("DELETE", f"/api/admin/cook/{cook_id}", "Failed to delete cook")
        if data is None:
            return False
        self.toaster.success(data.get("message") or "Cook deleted")
        self.load()
        return True


ROUTES: Dict[str, Callable[["AdminConsole"], AdminView]] = {
    "/": PlaceholderView,
    "/admin-dashboard": DashboardView,
    "/all-bookings": BookingsView,
    "/add-cook": AddCookView,
    "/cook-list": CooksListView,
}


@dataclass
class Screen:
    """What the console shows: the login form, or the shell with a routed view."""

    login: bool
    navbar: bool = False
    sidebar: List[Tuple[str, str]] = field(default_factory=list)
    view: Optional[AdminView] = None


class AdminConsole:
    def __init__(self, client: httpx.Client, store: Optional[SessionStore] = None, toaster: Optional[Toaster] = None) -> None:
        self.client = client
        self.store = store or SessionStore()
        self.toaster = toaster or Toaster()

    @property
    def token(self) -> Optional[str]:
        return self.store.get(ADMIN_TOKEN_KEY)

    def login(self, email: str, password: str) -> bool:
        try:
            data = request_envelope(self.client, "POST", "/api/admin/login", None, json={"email": email, "password": password})
        except (httpx.HTTPError, ValueError) as exc:
            self.toaster.error(failure_message(exc, "Login failed"))
            return False
        if not data.get("success") or not data.get("token"):
            self.toaster.error(data.get("message") or "Login failed")
            return False
        self.store.set(ADMIN_TOKEN_KEY, data["token"])
        return True

    def logout(self) -> None:
        self.store.remove(ADMIN_TOKEN_KEY)

    def render(self, path: str = "/") -> Screen:
        if not self.token:
            return Screen(login=True)
        factory = ROUTES.get(path)
        view = factory(self) if factory else None
        if view is not None:
            view.load()
        return Screen(login=False, navbar=True, sidebar=list(SIDEBAR_LINKS), view=view)
