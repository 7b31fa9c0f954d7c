"""Database engine, session factory and request-scoped sessions"""

import ssl
from typing import AsyncGenerator, Dict, Tuple

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from schoolpay.config import settings

_SSL_REQUIRED = {"require", "required", "verify-ca", "verify-full"}


def asyncpg_url(url: str) -> Tuple[str, Dict[str, object]]:
    """
    Rewrite a libpq-style URL for asyncpg.

    asyncpg rejects ``sslmode``; hosted Postgres providers hand out URLs with it,
    so it is stripped and replaced by an encrypting, non-verifying SSL context.
    """
    parsed = make_url(url).set(drivername="postgresql+asyncpg")
    connect_args: Dict[str, object] = {}
    sslmode = parsed.query.get("sslmode")
    if sslmode is not None:
        if str(sslmode).lower() in _SSL_REQUIRED:
            ctx = ssl.create_default_context()
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
            connect_args["ssl"] = ctx
        parsed = parsed.difference_update_query(["sslmode"])
    return parsed.render_as_string(hide_password=False), connect_args


database_url, connect_args = asyncpg_url(settings.DATABASE_URL)

engine = create_async_engine(
    database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    echo=settings.DEBUG,
)

# Also used outside requests by the session bootstrap
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session. Services commit their own units of work;
    anything left pending when the endpoint returns is committed here.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping() -> None:
    """Run a trivial query; raises when the database cannot answer."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def init_db() -> None:
    """Create tables straight from the models (development only; use Alembic elsewhere)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
