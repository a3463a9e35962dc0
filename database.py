"""Industrial IoT Monitor — Database Connection Manager.

Async database connection management using SQLAlchemy 2.0 (Async) over
aiosqlite. Owns the process-wide engine and session maker.

Usage:
    from database import get_db, init_database, shutdown_database

    # In FastAPI lifespan
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_database()
        yield
        await shutdown_database()

    # In routes
    @app.get("/machines")
    async def get_machines(db: AsyncSession = Depends(get_db)):
        result = await db.execute(select(Machine))
        return result.scalars().all()
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import db.models  # noqa: F401  registers tables on Base.metadata
from config import get_settings
from db.base import Base
from logger import get_logger

# =============================================================================
# Module State
# =============================================================================

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None

logger = get_logger(__name__)

SLOW_QUERY_THRESHOLD_MS = 500


# =============================================================================
# Engine Factory
# =============================================================================

def _create_engine() -> AsyncEngine:
    """Create the async database engine from settings."""
    settings = get_settings()
    db_settings = settings.database

    logger.info("Creating database engine", url=db_settings.url_safe)

    engine = create_async_engine(
        db_settings.url,
        echo=db_settings.echo or settings.debug,
        pool_pre_ping=True,
        hide_parameters=True,
    )
    _register_engine_events(engine)
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the async session maker bound to the engine.

    Args:
        engine: The async database engine.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Avoid lazy loading issues with async
        autoflush=False,
    )


def _register_engine_events(engine: AsyncEngine) -> None:
    """Register event listeners for connection monitoring and slow query logging."""
    query_start_key = "_query_start_time"

    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        logger.debug("Database connection established")

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def before_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        conn.info[query_start_key] = time.perf_counter()

    @event.listens_for(engine.sync_engine, "after_cursor_execute")
    def after_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        """Log slow queries (>500ms)."""
        start_time = conn.info.pop(query_start_key, None)
        if start_time is None:
            return

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        if elapsed_ms > SLOW_QUERY_THRESHOLD_MS:
            truncated_statement = statement[:500] + "..." if len(statement) > 500 else statement
            logger.warning(
                "slow_query",
                query=truncated_statement,
                latency_ms=round(elapsed_ms, 2),
                threshold_ms=SLOW_QUERY_THRESHOLD_MS,
            )


async def create_tables(engine: AsyncEngine) -> None:
    """Create every table registered on the declarative base, if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# =============================================================================
# Lifecycle Management
# =============================================================================

async def init_database() -> None:
    """Initialize the database engine, session maker and schema.

    Call this during application startup (e.g., in FastAPI lifespan).

    Raises:
        RuntimeError: If the database cannot be reached or created.
    """
    global _engine, _session_maker

    if _engine is not None:
        logger.warning("Database already initialized, skipping")
        return

    try:
        _engine = _create_engine()
        _session_maker = create_session_maker(_engine)

        await create_tables(_engine)
        async with _engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            result.fetchone()

        logger.info("Database initialized successfully")

    except Exception as exc:
        logger.error(
            "Database initialization failed",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        if _engine is not None:
            await _engine.dispose()
            _engine = None
        _session_maker = None
        raise RuntimeError(f"Failed to initialize database: {exc}") from exc


async def shutdown_database() -> None:
    """Dispose all connections held by the engine."""
    global _engine, _session_maker

    if _engine is None:
        logger.warning("Database not initialized, nothing to shutdown")
        return

    logger.info("Shutting down database connections")

    try:
        await _engine.dispose()
        logger.info("Database connections disposed successfully")
    except Exception as exc:
        logger.error(
            "Error disposing database connections",
            error_type=type(exc).__name__,
            error=str(exc),
        )
    finally:
        _engine = None
        _session_maker = None


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get the current session maker.

    Raises:
        RuntimeError: If database is not initialized.
    """
    if _session_maker is None:
        raise RuntimeError(
            "Database not initialized. Call init_database() first."
        )
    return _session_maker


# =============================================================================
# FastAPI Dependency
# =============================================================================

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database session injection.

    The session is committed if no exception occurs, rolled back otherwise.

    Raises:
        RuntimeError: If database is not initialized.
        DBAPIError: If database operation fails.
    """
    session = get_session_maker()()

    try:
        yield session
        await session.commit()
    except (OperationalError, InterfaceError) as exc:
        await session.rollback()
        logger.error(
            "Database connection error",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise
    except DBAPIError as exc:
        await session.rollback()
        logger.error(
            "Database operation failed",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Context manager version of get_db for non-FastAPI usage.

    Use this when you need a database session outside of a request context,
    such as in the broadcast loop or at startup.

    Example:
        async def background_task():
            async with get_db_context() as db:
                result = await db.execute(select(Machine))
                machines = result.scalars().all()
    """
    session = get_session_maker()()

    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


# =============================================================================
# Health Check
# =============================================================================

async def check_database_health() -> dict[str, Any]:
    """Check database connectivity for health endpoints."""
    if _engine is None:
        return {
            "status": "unhealthy",
            "error": "Database not initialized",
        }

    try:
        async with _engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            result.fetchone()
        return {"status": "healthy", "database": get_settings().database.url_safe}

    except Exception as exc:
        logger.error(
            "Database health check failed",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return {
            "status": "unhealthy",
            "error": str(exc),
        }
