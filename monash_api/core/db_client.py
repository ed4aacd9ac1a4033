"""
Async relational store access using SQLAlchemy 2.0.

Provides:
- DatabaseManager: engine/session lifecycle for one database URL
- SessionQuerySource: parameterized SQL text execution over a session, the
  query source consumed by the pagination engine and the services
- Translation of driver integrity errors into persistence signals

Note: signal translation is the only place that knows store-specific error
vocabulary (MySQL error numbers, PostgreSQL SQLSTATEs, SQLite messages).
"""

import asyncio
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool

from monash_api.core.config import Settings, settings
from monash_api.core.exceptions import PersistenceError
from monash_api.core.logging import get_db_logger
from monash_api.models.tables import Base
from monash_api.utils.error_taxonomy import Signal

logger = get_db_logger()

# Quoted literals are matched first so a "?" inside them is left alone
_PLACEHOLDER_PATTERN = re.compile(r"'(?:[^']|'')*'|\"[^\"]*\"|\?")

_MYSQL_SIGNALS = {
    1062: Signal.UNIQUE_VIOLATION,
    1451: Signal.FOREIGN_KEY_ON_DELETE,
    1452: Signal.FOREIGN_KEY_ON_INSERT,
}

UNCLASSIFIED_INTEGRITY_SIGNAL = "integrity_error"


def bind_positional(query: str, params: Sequence[Any]) -> Tuple[str, Dict[str, Any]]:
    """Rewrite ``?`` placeholders into named binds for ``sqlalchemy.text``.

    Args:
        query: SQL text using ``?`` positional placeholders
        params: Values bound to the placeholders, in order

    Returns:
        Tuple of (SQL text with ``:p0, :p1, ...`` binds, bind dictionary)

    Raises:
        ValueError: If the number of placeholders and parameters differ
    """
    binds: Dict[str, Any] = {}
    placeholders = 0

    def replace(match: "re.Match[str]") -> str:
        nonlocal placeholders
        token = match.group(0)
        if token != "?":
            return token
        name = f"p{placeholders}"
        if placeholders < len(params):
            binds[name] = params[placeholders]
        placeholders += 1
        return f":{name}"

    statement = _PLACEHOLDER_PATTERN.sub(replace, query)
    if placeholders != len(params):
        raise ValueError(
            f"Query has {placeholders} placeholder(s) but {len(params)} parameter(s) were given"
        )
    return statement, binds


def _is_delete_side(statement: str, detail: str) -> bool:
    verb = statement.lstrip().split(None, 1)[0].upper() if statement.strip() else ""
    return verb == "DELETE" or "still referenced" in detail.lower()


def signal_for_integrity_error(exc: IntegrityError, statement: str) -> str:
    """Map a driver integrity error onto a persistence signal key."""
    orig = exc.orig
    detail = str(orig) if orig is not None else str(exc)

    code = orig.args[0] if orig is not None and getattr(orig, "args", None) else None
    if isinstance(code, int) and code in _MYSQL_SIGNALS:
        return _MYSQL_SIGNALS[code].value

    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == "23505":
        return Signal.UNIQUE_VIOLATION.value
    if sqlstate == "23503":
        if _is_delete_side(statement, detail):
            return Signal.FOREIGN_KEY_ON_DELETE.value
        return Signal.FOREIGN_KEY_ON_INSERT.value

    lowered = detail.lower()
    if "unique constraint failed" in lowered:
        return Signal.UNIQUE_VIOLATION.value
    if "foreign key constraint failed" in lowered:
        if _is_delete_side(statement, detail):
            return Signal.FOREIGN_KEY_ON_DELETE.value
        return Signal.FOREIGN_KEY_ON_INSERT.value

    return UNCLASSIFIED_INTEGRITY_SIGNAL


class SessionQuerySource:
    """Execute parameterized SQL text on an async session.

    Rows come back as plain dictionaries keyed by column label.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def execute(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        result = await self._run(query, params)
        if not result.returns_rows:
            return []
        return [dict(row) for row in result.mappings().all()]

    async def execute_write(self, query: str, params: Sequence[Any] = ()) -> int:
        """Run an INSERT/UPDATE/DELETE and return the affected row count."""
        result = await self._run(query, params)
        return result.rowcount

    async def _run(self, query: str, params: Sequence[Any]):
        statement, binds = bind_positional(query, params)
        try:
            return await self.session.execute(text(statement), binds)
        except IntegrityError as exc:
            raise PersistenceError(
                signal_for_integrity_error(exc, query),
                str(exc.orig) if exc.orig is not None else str(exc),
                statement=query,
            ) from exc


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Manages the async engine and sessions for one database URL.

    The engine is created lazily on first use so importing the application
    never opens a connection.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
        echo: bool = False,
    ):
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "DatabaseManager":
        return cls(
            app_settings.database_url,
            pool_size=app_settings.DB_POOL_SIZE,
            max_overflow=app_settings.DB_MAX_OVERFLOW,
            pool_timeout=app_settings.DB_POOL_TIMEOUT,
            pool_recycle=app_settings.DB_POOL_RECYCLE,
            echo=app_settings.DB_ECHO,
        )

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.database_url).get_backend_name() == "sqlite"

    def _create_engine(self) -> AsyncEngine:
        """Create engine for the configured URL."""
        url = make_url(self.database_url)

        # Log connection info without password - NEVER log credentials
        logger.info(
            "Creating database engine",
            backend=url.get_backend_name(),
            host=url.host,
            port=url.port,
            database=url.database,
        )

        if self.is_sqlite:
            # One shared connection, otherwise every checkout of an in-memory
            # database would see an empty schema
            engine = create_async_engine(
                self.database_url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=self.echo,
            )
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
            return engine

        return create_async_engine(
            self.database_url,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_timeout=self.pool_timeout,
            pool_recycle=self.pool_recycle,
            echo=self.echo,
        )

    def _setup_engine(self) -> None:
        """Initialize engine and session factory."""
        self._engine = self._create_engine()
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def engine(self) -> AsyncEngine:
        """Get the async engine, creating it on first access."""
        if self._engine is None:
            self._setup_engine()
        return self._engine

    def session_factory(self) -> AsyncSession:
        """Open a new session bound to the engine."""
        if self._session_factory is None:
            self._setup_engine()
        return self._session_factory()

    async def test_connection(self, timeout: float = 15.0) -> bool:
        """Test database connectivity with timeout."""
        try:
            async with asyncio.timeout(timeout):
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
            logger.info("Database connection test successful")
            return True
        except asyncio.TimeoutError:
            logger.error("Database connection test timed out", timeout=timeout)
            return False
        except Exception as e:
            logger.error("Database connection test failed", error=str(e))
            return False

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get an async session with automatic commit/rollback.

        Usage:
            async with db.session() as session:
                result = await session.execute(...)
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def query_source(self) -> AsyncGenerator[SessionQuerySource, None]:
        """Session-scoped query source, committed when the block exits cleanly."""
        async with self.session() as session:
            yield SessionQuerySource(session)

    async def create_tables(self):
        """Create all tables (for development/testing)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self):
        """Drop all tables (for testing only)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Database tables dropped")

    async def close(self):
        """Dispose the engine and its pooled connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
        logger.info("Database connections closed")


# Global database manager instance
db = DatabaseManager.from_settings(settings)
