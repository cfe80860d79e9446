import inspect
import threading
import time
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator, Dict

from loguru import logger
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..config import config

_query_context: ContextVar[dict[str, str] | None] = ContextVar("_db_query_context", default=None)

_DRIVER_PREFIXES = {
    'postgres://': 'postgresql+asyncpg://',
    'postgresql://': 'postgresql+asyncpg://',
    'sqlite://': 'sqlite+aiosqlite://',
}


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany) -> None:
    conn.info.setdefault('query_start_time', []).append(time.perf_counter())


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany) -> None:
    """Log executed statements using loguru without assuming driver internals."""
    try:
        started = conn.info.get('query_start_time') or [time.perf_counter()]
        elapsed = (time.perf_counter() - started.pop(-1)) * 1000

        ctx = _query_context.get()

        parts = ["SQL: {} | elapsed={:.2f}ms", statement, elapsed]
        if parameters:
            parts[0] += " | args={}"
            parts.append(parameters)
        if ctx and ctx.get('call_site'):
            parts[0] += " | caller={}"
            parts.append(ctx['call_site'])

        logger.debug(*parts)
    except Exception as exc:  # pragma: no cover - safeguard against logging errors
        logger.debug("SQL: <unable to log query> ({})", exc)


def _handle_error(exception_context) -> None:
    conn = exception_context.connection
    if conn is not None and conn.info.get('query_start_time'):
        conn.info['query_start_time'].pop(-1)
    logger.debug(
        "SQL failed: {} | exception={}",
        exception_context.statement,
        exception_context.original_exception,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _call_site() -> str:
    """Capture the first frame outside this module to pinpoint the session owner."""
    frame = inspect.currentframe()
    while frame:
        module = frame.f_globals.get('__name__', '')
        if module != __name__ and not module.startswith('contextlib'):
            return f"{module}:{frame.f_code.co_name}:{frame.f_lineno}"
        frame = frame.f_back
    return "unknown"


class DatabaseManager:
    """
    Async SQLAlchemy engine manager.

    - Singleton, thread-safe
    - Labeled engines loaded from configuration (DATABASE_URL_* / POSTGRES_URL_*)
    - One long-lived engine per label, created lazily and reused
    - Session and transaction context helpers
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, '_initialized'):
            return

        self._engines: Dict[str, AsyncEngine] = {}
        self._sessionmakers: Dict[str, async_sessionmaker[AsyncSession]] = {}
        self._connection_strings: Dict[str, str] = {}
        self._lock = threading.Lock()

        self._load_connection_strings()
        self._initialized = True

    def _load_connection_strings(self):
        for key, value in config.items():
            label = self._get_label_from_env_var(key)
            if label is None or not value:
                continue
            if label in self._connection_strings:
                logger.warning(
                    "Database connection string for label '{}' already exists, '{}' will override it",
                    label, key
                )
            self._connection_strings[label] = self.normalize_url(value)
            logger.info("Loaded database URL for label '{}': {}", label, self._hide_password_in_connection_string(value))

        if 'default' not in self._connection_strings:
            default_url = self.normalize_url(config.get_database_url('default'))
            self._connection_strings['default'] = default_url
            logger.info("Using default database URL: {}", self._hide_password_in_connection_string(default_url))

    @staticmethod
    def _get_label_from_env_var(env_var: str) -> str | None:
        for prefix in ('DATABASE_URL_', 'POSTGRES_URL_'):
            if env_var.startswith(prefix):
                return env_var[len(prefix):].lower()
        return None

    @staticmethod
    def normalize_url(url: str) -> str:
        """Rewrite plain driver URLs to their asyncio driver equivalents."""
        for prefix, replacement in _DRIVER_PREFIXES.items():
            if url.startswith(prefix):
                return replacement + url[len(prefix):]
        return url

    def _hide_password_in_connection_string(self, url: str) -> str:
        try:
            if '://' in url and '@' in url:
                proto, rest = url.split('://', 1)
                at = rest.rfind('@')
                if at != -1:
                    auth = rest[:at]
                    host = rest[at + 1:]
                    if ':' in auth:
                        user, pwd = auth.split(':', 1)
                        if user and pwd:
                            return f"{proto}://{user}:***@{host}"
            return url
        except Exception:
            return url

    def register(self, label: str, url: str) -> AsyncEngine | None:
        """
        Register (or replace) the connection URL of a label.

        Returns the engine previously bound to the label, if any, so the caller
        can dispose it.
        """
        with self._lock:
            self._connection_strings[label] = self.normalize_url(url)
            self._sessionmakers.pop(label, None)
            previous = self._engines.pop(label, None)
        logger.info("Registered database URL for label '{}': {}", label, self._hide_password_in_connection_string(url))
        return previous

    def get_engine(self, label: str | None = None) -> AsyncEngine:
        label = label or 'default'
        if label not in self._connection_strings:
            raise ValueError(f"No database connection string found for label '{label}'")

        with self._lock:
            engine = self._engines.get(label)
            if engine is not None:
                return engine

            url = self._connection_strings[label]
            logger.info("Open database engine for label '{}'", label)
            engine = self._create_engine(url)
            self._engines[label] = engine
            self._sessionmakers[label] = async_sessionmaker(engine, expire_on_commit=False)
            return engine

    def _create_engine(self, url: str) -> AsyncEngine:
        from app.app_config import get_app_environ_config

        app_config = get_app_environ_config()
        if url.startswith('sqlite'):
            engine = create_async_engine(url)
            event.listen(engine.sync_engine, 'connect', _enable_sqlite_foreign_keys)
        else:
            engine = create_async_engine(
                url,
                pool_size=app_config.DB_POOL_SIZE,
                pool_pre_ping=True,
            )

        if app_config.DB_ECHO or app_config.DEBUG:
            event.listen(engine.sync_engine, 'before_cursor_execute', _before_cursor_execute)
            event.listen(engine.sync_engine, 'after_cursor_execute', _after_cursor_execute)
        event.listen(engine.sync_engine, 'handle_error', _handle_error)
        return engine

    def get_sessionmaker(self, label: str | None = None) -> async_sessionmaker[AsyncSession]:
        label = label or 'default'
        self.get_engine(label)
        return self._sessionmakers[label]

    @asynccontextmanager
    async def session(self, label: str | None = None) -> AsyncIterator[AsyncSession]:
        """Read-only style session; nothing is committed on exit."""
        token = _query_context.set({'call_site': _call_site()})
        try:
            async with self.get_sessionmaker(label)() as session:
                yield session
        finally:
            _query_context.reset(token)

    @asynccontextmanager
    async def transaction(self, label: str | None = None) -> AsyncIterator[AsyncSession]:
        """Session inside a transaction: commit on success, rollback on any error."""
        token = _query_context.set({'call_site': _call_site()})
        try:
            async with self.get_sessionmaker(label).begin() as session:
                yield session
        finally:
            _query_context.reset(token)

    async def close_engine(self, label: str):
        with self._lock:
            engine = self._engines.pop(label, None)
            self._sessionmakers.pop(label, None)
        if engine is not None:
            try:
                await engine.dispose()
                logger.info("Closed database engine for label '{}'", label)
            except Exception as e:
                logger.error("Error closing database engine for label '{}': {}", label, e)

    async def close_all(self):
        with self._lock:
            labels = list(self._engines.keys())
        for label in labels:
            await self.close_engine(label)

    def get_connection_info(self) -> Dict[str, Dict[str, str]]:
        """Return connection info with masked passwords per label."""
        return {
            label: {
                'url': url,
                'safe_url': self._hide_password_in_connection_string(url),
            }
            for label, url in self._connection_strings.items()
        }

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close_all()


def get_database_manager() -> DatabaseManager:
    return DatabaseManager()
