"""
Async SQLAlchemy engine and sessions.

SQLite (aiosqlite) is the default store; PostgreSQL (asyncpg) is used when
DATABASE_URL points at it. The engine is created on first use so tests can set
DATABASE_URL before anything connects.
"""

from typing import Any, AsyncGenerator, Callable, Dict, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from credensuite.core.config import settings

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None

# Dialects whose INSERT supports ON CONFLICT .. RETURNING
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

_ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def upsert_insert(db: AsyncSession) -> Optional[Callable]:
    """The dialect ``insert`` for the session's database, None if it has no ON CONFLICT"""
    return UPSERT_INSERTS.get(db.get_bind().dialect.name)


def get_database_url() -> str:
    """DATABASE_URL with the async driver filled in for bare postgresql/sqlite URLs"""
    url = settings.DATABASE_URL
    for scheme, async_scheme in _ASYNC_DRIVERS.items():
        if url.startswith(scheme):
            return async_scheme + url[len(scheme):]
    return url


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # One connection per session; concurrent writers wait on the file lock
        return {"poolclass": NullPool, "connect_args": {"check_same_thread": False, "timeout": 30}}
    if settings.ENVIRONMENT == "production":
        return {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_pre_ping": True,
        }
    return {"poolclass": NullPool}


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        url = get_database_url()
        _engine = create_async_engine(url, echo=settings.DB_ECHO, **_engine_options(url))
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the lazily created engine"""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False, autoflush=False)
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    Services commit their own units of work; anything still pending when the
    endpoint returns is committed here, and an exception rolls it back.
    """
    async with get_session_local()() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables for every registered model"""
    import credensuite.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
