from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from talkit.config import get_settings


class Base(DeclarativeBase):
    pass


def convert_database_url(url: str) -> str:
    """Point plain postgres URLs at the asyncpg driver; asyncpg takes ssl via connect_args."""
    parsed = urlparse(url)
    if parsed.scheme not in ("postgres", "postgresql"):
        return url
    query_params = parse_qs(parsed.query)
    query_params.pop("sslmode", None)
    new_query = urlencode(query_params, doseq=True)
    return urlunparse(parsed._replace(scheme="postgresql+asyncpg", query=new_query))


def make_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=False)

    return create_async_engine(
        convert_database_url(database_url),
        echo=False,
        pool_pre_ping=True,
        pool_recycle=300,
        connect_args={"ssl": True} if "sslmode=require" in database_url else {},
    )


@lru_cache
def get_engine() -> AsyncEngine:
    return make_engine(get_settings().database_url)


def make_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return make_session_maker(get_engine())


async def init_db(engine: AsyncEngine | None = None) -> None:
    import talkit.models  # noqa: F401
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
