from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.pool import NullPool, StaticPool

from task_manager.core import get_settings

# Get application settings
settings = get_settings()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite gets foreign key enforcement on every connection; an in-memory
    SQLite database is pinned to a single shared connection.
    """
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    in_memory = is_sqlite and url.database in (None, "", ":memory:")

    if is_sqlite and not in_memory:
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    if in_memory:
        new_engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        new_engine = create_async_engine(database_url, echo=echo, poolclass=NullPool)

    if is_sqlite:
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    return new_engine


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


# Create async engine
engine = create_engine_for_url(settings.DATABASE_URL, echo=settings.DEBUG)

# Create session factory
async_session_factory = create_session_factory(engine)


# Dependency for FastAPI
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Initialize database
async def init_db(bind: AsyncEngine = engine):
    async with bind.begin() as conn:
        # Import here to avoid circular imports
        from task_manager.db.models import Base
        # Create tables if they don't exist
        await conn.run_sync(Base.metadata.create_all)
