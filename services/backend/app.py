import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy import inspect

from common.auth import ensure_bootstrap_admin
from common.config import get_settings
from common.database import Base, SessionLocal, engine
from common.errors import register_error_handlers
from common.logging_middleware import add_audit_middleware
from common.models import Admin
from common.rate_limit import apply_rate_limiter
from services.backend.routers import admin, cook, user

logger = logging.getLogger(__name__)
settings = get_settings()


def bootstrap_admin() -> None:
    if not inspect(engine).has_table(Admin.__tablename__):
        logger.warning("Skipping admin bootstrap: table %s does not exist yet", Admin.__tablename__)
        return
    with SessionLocal() as db:
        ensure_bootstrap_admin(db)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    bootstrap_admin()
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Cook Booking API", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    register_error_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "backend")
    fastapi_app.include_router(admin.router)
    fastapi_app.include_router(cook.router)
    fastapi_app.include_router(user.router)
    return fastapi_app


app = create_app()


@app.get("/", response_class=PlainTextResponse, tags=["health"])
def root() -> str:
    return "API WORKING"


def run() -> None:
    """Serve the API on the configured ``PORT``."""

    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
