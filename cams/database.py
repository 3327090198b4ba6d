"""Database engine, declarative base and the request-scoped session dependency."""

from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from cams.config import settings

# libpq sslmode values asyncpg understands as its `ssl` argument
ASYNCPG_SSL_MODES = ("disable", "allow", "prefer", "require", "verify-ca", "verify-full")


def get_engine_url_and_connect_args(database_url: str | None = None):
    """
    Move `sslmode`/`ssl` out of the URL (asyncpg rejects them as query
    parameters) and into connect_args. Shared by the app, Alembic and the
    seed script.
    """
    url = database_url or settings.database_url
    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    modes = query.pop("sslmode", []) + query.pop("ssl", [])
    if not modes:
        return url, {}
    url = urlunparse(parsed._replace(query=urlencode(query, doseq=True)))
    mode = modes[0].lower()
    if mode == "true":
        mode = "require"
    connect_args = {"ssl": mode} if mode in ASYNCPG_SSL_MODES else {}
    return url, connect_args


_db_url, _connect_args = get_engine_url_and_connect_args()


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


engine = create_async_engine(
    _db_url,
    echo=settings.log_level == "DEBUG",
    connect_args=_connect_args,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database sessions."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
