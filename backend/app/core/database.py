"""Engines, session factories and the declarative base for the concept graph."""

from collections.abc import AsyncGenerator, Generator
from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, create_engine, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from app.core.config import settings

# UUID primary/foreign keys as strings; plain text on SQLite so ids round-trip unchanged
UUIDType = UUID(as_uuid=False).with_variant(String(36), "sqlite")

# Async engine: health probes, seeding
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
)

# Sync engine for services and RQ workers, built on first use
_sync_engine = None


def get_sync_engine():
    """Return the shared sync engine.

    Creation is deferred so importing this module does not require psycopg2.
    """
    global _sync_engine
    if _sync_engine is None:
        _sync_engine = create_engine(
            settings.sync_database_url,
            echo=settings.debug,
            future=True,
        )
    return _sync_engine


async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base; every table gets a string UUID id and created_at."""

    id: Mapped[str] = mapped_column(
        UUIDType,
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an AsyncSession, committing on success and rolling back on error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_sync_db() -> Generator[Session, None, None]:
    """Dependency to get a sync database session.

    Sync endpoints run in FastAPI's threadpool, so each request gets
    its own session. Services decide when to commit.
    """
    with Session(get_sync_engine(), expire_on_commit=False) as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise


async def init_db() -> None:
    """Create all tables directly. Local development only; deployments run alembic."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the async engine pool."""
    await engine.dispose()
