import io
import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "AdminPass123")

from common.config import get_settings, reset_settings_cache  # noqa: E402

reset_settings_cache()

from common.database import Base, SessionLocal, engine  # noqa: E402
from common.media import get_storage  # noqa: E402
from services.backend.app import app  # noqa: E402
from services.backend.routers.cook import cook_list_cache  # noqa: E402

ADMIN_EMAIL = os.environ["ADMIN_EMAIL"]
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]


class FakeStorage:
    """Stands in for Cloudinary; records uploads and returns predictable URLs."""

    def __init__(self) -> None:
        self.uploads: list[tuple[str, str | None]] = []

    def upload_image(self, file, content_type, subfolder, size=None) -> str:
        self.uploads.append((subfolder, content_type))
        return f"https://res.cloudinary.test/{subfolder}/{len(self.uploads)}.png"


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    cook_list_cache.clear()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def fake_storage() -> Generator[FakeStorage, None, None]:
    storage = FakeStorage()
    app.dependency_overrides[get_storage] = lambda: storage
    yield storage
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture()
def client(fake_storage: FakeStorage) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def admin_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    return {"token": response.json()["token"]}


def image_file(name: str = "cook.png") -> tuple[str, io.BytesIO, str]:
    return (name, io.BytesIO(b"\x89PNG\r\n\x1a\nfake"), "image/png")


def cook_form(**overrides: str) -> dict[str, str]:
    form = {
        "name": "Maria Rossi",
        "email": "maria@cooks.example.com",
        "password": "CookPass123",
        "cuisine": "Italian",
        "experience": "4 Years",
        "about": "Fresh pasta and regional Italian dinners.",
        "fees": "50",
        "address": '{"line1": "12 Via Roma", "line2": "Turin"}',
    }
    form.update(overrides)
    return form


@pytest.fixture()
def make_cook(client: TestClient, admin_headers: dict[str, str]):
    """Create a cook through the admin API and return its id."""

    def factory(**overrides: str) -> int:
        form = cook_form(**overrides)
        response = client.post(
            "/api/admin/add-cook",
            data=form,
            files={"image": image_file()},
            headers=admin_headers,
        )
        assert response.json()["success"] is True, response.json()
        cooks = client.get("/api/admin/all-cooks", headers=admin_headers).json()["cooks"]
        return next(c["id"] for c in cooks if c["email"] == form["email"])

    return factory


@pytest.fixture()
def make_user(client: TestClient):
    """Register a user and return its ``token`` header."""

    def factory(email: str = "client@example.com", name: str = "Client", password: str = "Passw0rd!") -> dict[str, str]:
        response = client.post("/api/user/register", json={"name": name, "email": email, "password": password})
        assert response.json()["success"] is True, response.json()
        return {"token": response.json()["token"]}

    return factory


@pytest.fixture()
def settings():
    return get_settings()
