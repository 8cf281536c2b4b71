"""Database connection and session management."""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from .config import settings


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def create_engine_for(url: str, echo: bool = False):
    """
    Create an async engine for the given URL.

    SQLite needs StaticPool and foreign keys switched on explicitly,
    otherwise ON DELETE CASCADE is ignored. Built-in lower() folds only
    ASCII letters, so it is replaced with a Unicode-aware one (ILIKE on
    SQLite compiles to lower(x) LIKE lower(y)).
    """
    if "sqlite" in url:
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,  # SQLite requires StaticPool for async
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _configure_sqlite_connection(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

        return engine

    return create_async_engine(
        url,
        echo=echo,
        poolclass=NullPool,  # Disable connection pooling for PostgreSQL
    )


engine = create_engine_for(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session.

    Commits on success, rolls back on any error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db():
    """Initialize database (create all tables)."""
    from ..models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
