# gymbook/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import get_settings
from .db import init_db
from .errors import register_error_handlers
from .routers import admin_routes, auth_routes, bookings_routes, users_routes

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Gym booking API ready")
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Gym Booking API", lifespan=lifespan)
    register_error_handlers(app)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.include_router(auth_routes.router)
    app.include_router(users_routes.router)
    app.include_router(bookings_routes.router)
    app.include_router(admin_routes.router)
    return app


app = create_app()
