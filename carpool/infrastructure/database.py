"""
Async SQLAlchemy engine and session factory.

``Database`` is an explicit handle: the application factory builds one and
stores it on ``app.state`` so request dependencies, the seed script and the
tests all pass the same handle down instead of sharing module state.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


class Database:
    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> "Database":
        if not url.startswith("sqlite"):
            engine_kwargs.setdefault("pool_size", 20)
            engine_kwargs.setdefault("max_overflow", 10)
        return cls(create_async_engine(url, echo=False, **engine_kwargs))

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self) -> None:
        # models must be imported so their tables are registered on Base
        from . import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
