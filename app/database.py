"""Database engine, session factory and the per-request session dependency."""

import logging
from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

MYSQL_DRIVER = "mysql+aiomysql"
DEFAULT_MYSQL_PORT = 3306

# ADO.NET keyword aliases mapped onto URL parts.
_KEYWORDS = {
    "server": "host",
    "host": "host",
    "data source": "host",
    "port": "port",
    "database": "database",
    "initial catalog": "database",
    "user": "username",
    "user id": "username",
    "userid": "username",
    "uid": "username",
    "username": "username",
    "password": "password",
    "pwd": "password",
}


def to_sqlalchemy_url(conn: str) -> URL:
    """
    Normalise a connection string into a SQLAlchemy URL.

    URLs (``dialect+driver://...``) are used verbatim. Anything else is
    treated as a ``Key=Value;`` connection string for MySQL.
    """
    if "://" in conn:
        return make_url(conn)

    parts: dict[str, str] = {}
    for segment in conn.split(";"):
        if not segment.strip():
            continue
        key, sep, value = segment.partition("=")
        if not sep:
            raise ConfigurationError(f"Malformed connection string segment: {segment!r}")
        target = _KEYWORDS.get(key.strip().lower())
        if target:
            parts[target] = value.strip()

    if "host" not in parts:
        raise ConfigurationError("Connection string has no Server/Host entry")

    return URL.create(
        MYSQL_DRIVER,
        username=parts.get("username"),
        password=parts.get("password"),
        host=parts["host"],
        port=int(parts.get("port", DEFAULT_MYSQL_PORT)),
        database=parts.get("database"),
    )


class Database:
    """Owns the async engine and the session factory for one application."""

    def __init__(self, conn: str | None, echo: bool = False) -> None:
        if not conn:
            raise ConfigurationError(
                "No database connection string: set DefaultConnection or "
                "ConnectionStrings.DefaultConnection"
            )
        url = to_sqlalchemy_url(conn)
        engine_kwargs: dict = {"echo": echo}
        if url.get_backend_name() == "mysql":
            engine_kwargs["pool_pre_ping"] = True
            engine_kwargs["pool_recycle"] = 3600
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        logger.info(
            "Database configured: %s",
            url.render_as_string(hide_password=True),
        )

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """One session per request; committed on success, rolled back on error."""
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
