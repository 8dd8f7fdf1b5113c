"""Database engine, session factory and declarative base."""
from typing import AsyncGenerator
from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from ticketdesk.config import Settings

Base = declarative_base()


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine described by the settings."""
    url = make_url(settings.database_url)
    if settings.database_password:
        url = url.set(password=settings.database_password)

    kwargs = {"echo": settings.database_echo}
    if url.get_backend_name() == "sqlite":
        # In-memory SQLite must share one connection across sessions
        kwargs.update(connect_args={"check_same_thread": False}, poolclass=StaticPool)
    else:
        kwargs.update(pool_pre_ping=True)
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create a session factory bound to the engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables."""
    # Register models on Base.metadata
    import ticketdesk.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency yielding a session from the application's session factory."""
    async with request.app.state.session_factory() as session:
        yield session
