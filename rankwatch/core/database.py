"""Database connection and session management using SQLAlchemy with async support."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from .config import get_global_settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class DatabaseManager:
    """Database connection and session manager."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        echo: Optional[bool] = None,
        **engine_kwargs: Any,
    ):
        """Initialize database manager with async engine.

        :param database_url: Async SQLAlchemy URL (uses settings if None)
        :param echo: Enable SQL logging (uses settings.debug if None)
        :param engine_kwargs: Extra create_async_engine arguments (e.g. poolclass)
        """
        settings = get_global_settings()
        self.database_url = database_url or settings.database_url

        self.engine = create_async_engine(
            self.database_url,
            echo=settings.debug if echo is None else echo,
            **engine_kwargs,
        )

        self.async_session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        """Create all tables registered on the declarative base."""
        # Register tables before create_all
        from rankwatch.features.tracking import orm_models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
