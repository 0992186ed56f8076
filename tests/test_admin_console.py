import io

import pytest

from clients.admin_console import (
    SIDEBAR_LINKS,
    AddCookView,
    AdminConsole,
    BookingsView,
    CooksListView,
    DashboardView,
    PlaceholderView,
)
from clients.session import ADMIN_TOKEN_KEY, SessionStore
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.fixture()
def console(client) -> AdminConsole:
    return AdminConsole(client)


@pytest.fixture()
def logged_in(console) -> AdminConsole:
    assert console.login(ADMIN_EMAIL, ADMIN_PASSWORD) is True
    return console


def test_without_token_only_login_renders(console):
    for path in ("/", "/admin-dashboard", "/cook-list"):
        screen = console.render(path)
        assert screen.login is True
        assert screen.view is None
        assert screen.navbar is False


def test_failed_login_keeps_login_form(console):
    assert console.login(ADMIN_EMAIL, "wrong-password") is False
    assert console.token is None
    assert console.toaster.last.message == "Invalid credentials"
    assert console.render("/").login is True


@pytest.mark.parametrize(
    "path, view_type",
    [
        ("/", PlaceholderView),
        ("/admin-dashboard", DashboardView),
        ("/all-bookings", BookingsView),
        ("/add-cook", AddCookView),
        ("/cook-list", CooksListView),
    ],
)
def test_route_table(logged_in, path, view_type):
    screen = logged_in.render(path)
    assert screen.login is False
    assert screen.navbar is True
    assert screen.sidebar == SIDEBAR_LINKS
    assert isinstance(screen.view, view_type)


def test_unknown_route_renders_shell_without_view(logged_in):
    screen = logged_in.render("/nowhere")
    assert screen.login is False
    assert screen.view is None


def test_logout_returns_to_login(logged_in):
    logged_in.logout()
    assert logged_in.token is None
    assert logged_in.render("/admin-dashboard").login is True


def test_token_persists_in_session_file(client, tmp_path):
    path = tmp_path / "session.json"
    first = AdminConsole(client, SessionStore(path))
    assert first.login(ADMIN_EMAIL, ADMIN_PASSWORD) is True

    reopened = AdminConsole(client, SessionStore(path))
    assert reopened.token == first.token
    assert reopened.render("/").login is False


def test_add_cook_then_manage_from_list(logged_in, fake_storage):
    add_view = logged_in.render("/add-cook").view
    assert add_view.submit() is False
    assert logged_in.toaster.last.message == "Image not selected"

    add_view.form.name = "Kenji Sato"
    add_view.form.email = "kenji@cooks.example.com"
    add_view.form.password = "CookPass123"
    add_view.form.cuisine = "Japanese"
    add_view.form.about = "Home-style ramen and izakaya plates."
    add_view.form.fees = "80"
    add_view.form.image = ("kenji.png", io.BytesIO(b"png"), "image/png")
    assert add_view.submit() is True
    assert logged_in.toaster.last.message == "Cook added"
    assert add_view.form.name == ""

    list_view = logged_in.render("/cook-list").view
    assert [c["name"] for c in list_view.cooks] == ["Kenji Sato"]
    cook_id = list_view.cooks[0]["id"]

    assert list_view.change_availability(cook_id) is True
    assert list_view.cooks[0]["available"] is False

    assert list_view.delete_cook(cook_id) is True
    assert list_view.cooks == []


def test_dashboard_and_bookings_views(client, logged_in, make_cook, make_user):
    cook_id = make_cook()
    headers = make_user()
    booking_id = client.post(
        "/api/user/book-cook",
        json={"cookId": cook_id, "slotDate": "20_11_2026", "slotTime": "10:00 AM"},
        headers=headers,
    ).json()["bookingId"]

    dashboard = logged_in.render("/admin-dashboard").view
    assert dashboard.dash_data["cooks"] == 1
    assert dashboard.dash_data["latestBookings"][0]["id"] == booking_id

    bookings = logged_in.render("/all-bookings").view
    assert [b["id"] for b in bookings.bookings] == [booking_id]
    assert bookings.cancel_booking(booking_id) is True
    assert bookings.bookings[0]["status"] == "cancelled"

    assert bookings.cancel_booking(booking_id) is False
    assert logged_in.toaster.last.message == "Booking already cancelled"


def test_expired_session_surfaces_toast(client, console):
    console.store.set(ADMIN_TOKEN_KEY, "stale-token")
    screen = console.render("/admin-dashboard")
    assert screen.login is False
    assert screen.view.dash_data is None
    assert console.toaster.last.message == "Invalid token"
