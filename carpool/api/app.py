"""
FastAPI application factory.

* Registers routes for auth, users, rides, chat, admin and the WS relay.
* Owns the store handle: builds (or receives) a ``Database`` and keeps it
  on ``app.state`` for the request dependencies.
* Starts / stops the relay fan-out listener via lifespan events.
* Applies rate-limiting, CORS and the uniform error handlers.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from carpool.api.errors import register_exception_handlers
from carpool.api.middleware import configure_limits, limiter
from carpool.api.routes import admin, auth, chat, realtime, rides, users
from carpool.config import Settings, settings as default_settings
from carpool.infrastructure.database import Database
from carpool.realtime.rooms import RoomManager
from carpool.workers.relay import build_relay


def create_app(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    settings = settings or default_settings
    database = database or Database.from_url(settings.database_url)
    logging.basicConfig(level=settings.log_level)

    rooms = RoomManager()
    relay = build_relay(rooms, settings.redis_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Prepare the store and relay on startup; release them on shutdown."""
        if settings.create_tables:
            await database.create_all()
        await relay.start()
        yield
        await relay.stop()
        await database.dispose()

    app = FastAPI(
        title="Carpool API",
        description=(
            "Coordinates shared rides: members post rides, join or leave "
            "them, and chat with everyone on the same ride."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.rooms = rooms
    app.state.relay = relay

    # Rate limiter
    app.state.limiter = limiter
    configure_limits(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    for module in (auth, users, rides, chat, admin):
        app.include_router(module.router, prefix=settings.api_prefix)
    app.include_router(realtime.router)

    return app
