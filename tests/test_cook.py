from conftest import cook_form

COOK_PASSWORD = cook_form()["password"]


def cook_headers(client, email: str = "maria@cooks.example.com") -> dict[str, str]:
    response = client.post("/api/cook/login", json={"email": email, "password": COOK_PASSWORD})
    return {"token": response.json()["token"]}


def book(client, headers, cook_id: int, slot_time: str = "10:00 AM") -> int:
    response = client.post(
        "/api/user/book-cook",
        json={"cookId": cook_id, "slotDate": "20_11_2026", "slotTime": slot_time},
        headers=headers,
    )
    return response.json()["bookingId"]


def test_public_list_hides_credentials(client, make_cook):
    make_cook()
    response = client.get("/api/cook/list")
    assert response.status_code == 200
    cooks = response.json()["cooks"]
    assert len(cooks) == 1
    assert cooks[0]["name"] == "Maria Rossi"
    assert "email" not in cooks[0]
    assert "hashedPassword" not in cooks[0]


def test_public_list_is_cached_until_cook_changes(client, make_cook, db_session):
    from common.models import Cook

    cook_id = make_cook()
    assert client.get("/api/cook/list").json()["cooks"][0]["cuisine"] == "Italian"

    cook = db_session.get(Cook, cook_id)
    cook.cuisine = "Sicilian"
    db_session.commit()
    assert client.get("/api/cook/list").json()["cooks"][0]["cuisine"] == "Italian"

    headers = cook_headers(client)
    client.post("/api/cook/update-profile", json={"fees": 65}, headers=headers)
    refreshed = client.get("/api/cook/list").json()["cooks"][0]
    assert refreshed["cuisine"] == "Sicilian"
    assert refreshed["fees"] == 65


def test_cook_login(client, make_cook):
    make_cook()
    ok = client.post("/api/cook/login", json={"email": "maria@cooks.example.com", "password": COOK_PASSWORD})
    assert ok.json()["success"] is True
    bad = client.post("/api/cook/login", json={"email": "maria@cooks.example.com", "password": "wrong-pass"})
    assert bad.status_code == 401
    assert bad.json()["success"] is False


def test_cook_sees_only_own_bookings(client, make_cook, make_user):
    maria = make_cook()
    other = make_cook(email="luca@cooks.example.com", name="Luca")
    user = make_user()
    book(client, user, maria)
    book(client, user, other)

    bookings = client.get("/api/cook/bookings", headers=cook_headers(client)).json()["bookings"]
    assert len(bookings) == 1
    assert bookings[0]["cookId"] == maria
    assert bookings[0]["cookData"]["name"] == "Maria Rossi"
    assert bookings[0]["userData"]["email"] == "client@example.com"


def test_complete_and_cancel(client, make_cook, make_user):
    maria = make_cook()
    other = make_cook(email="luca@cooks.example.com", name="Luca")
    user = make_user()
    first = book(client, user, maria, "10:00 AM")
    second = book(client, user, maria, "11:00 AM")
    foreign = book(client, user, other, "12:00 PM")
    headers = cook_headers(client)

    done = client.post("/api/cook/complete-booking", json={"bookingId": first}, headers=headers)
    assert done.json() == {"success": True, "message": "Booking completed"}
    cancel_done = client.post("/api/cook/cancel-booking", json={"bookingId": first}, headers=headers)
    assert cancel_done.json() == {"success": False, "message": "Completed bookings cannot be cancelled"}

    cancelled = client.post("/api/cook/cancel-booking", json={"bookingId": second}, headers=headers)
    assert cancelled.json() == {"success": True, "message": "Booking cancelled"}
    complete_cancelled = client.post("/api/cook/complete-booking", json={"bookingId": second}, headers=headers)
    assert complete_cancelled.json()["success"] is False

    not_mine = client.post("/api/cook/complete-booking", json={"bookingId": foreign}, headers=headers)
    assert not_mine.status_code == 403


def test_dashboard_counts_paid_and_completed_earnings(client, make_cook, make_user):
    maria = make_cook(fees="40")
    first_user = make_user()
    second_user = make_user(email="second@example.com")
    paid = book(client, first_user, maria, "10:00 AM")
    book(client, first_user, maria, "11:00 AM")
    completed = book(client, second_user, maria, "12:00 PM")

    client.post(
        "/api/user/process-payment",
        json={"bookingId": paid, "paymentMethod": "wallet"},
        headers=first_user,
    )
    headers = cook_headers(client)
    client.post("/api/cook/complete-booking", json={"bookingId": completed}, headers=headers)

    dash = client.get("/api/cook/dashboard", headers=headers).json()["dashData"]
    assert dash["earnings"] == 80
    assert dash["bookings"] == 3
    assert dash["clients"] == 2
    assert len(dash["latestBookings"]) == 3


def test_profile_and_update(client, make_cook):
    make_cook()
    headers = cook_headers(client)

    profile = client.get("/api/cook/profile", headers=headers).json()
    assert profile["success"] is True
    assert profile["profileData"]["email"] == "maria@cooks.example.com"

    update = client.post(
        "/api/cook/update-profile",
        json={"fees": 70, "available": False, "address": {"line1": "1 New St", "line2": "Milan"}},
        headers=headers,
    )
    assert update.json() == {"success": True, "message": "Profile updated"}

    data = client.get("/api/cook/profile", headers=headers).json()["profileData"]
    assert data["fees"] == 70
    assert data["available"] is False
    assert data["address"] == {"line1": "1 New St", "line2": "Milan"}
    assert data["about"] == "Fresh pasta and regional Italian dinners."
