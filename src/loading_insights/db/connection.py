"""Async SQLAlchemy engine and session factory."""

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from config.settings import settings

_LOCAL_HOSTS = {None, "", "localhost", "127.0.0.1"}


def _normalise_url(raw: str) -> URL:
    """Point PostgreSQL URLs at the async psycopg driver; require SSL off-box."""
    if raw.startswith("postgres://"):
        raw = "postgresql://" + raw[len("postgres://"):]
    url = make_url(raw)
    if url.get_backend_name() != "postgresql":
        return url
    if url.drivername != "postgresql+psycopg":
        url = url.set(drivername="postgresql+psycopg")
    if url.host not in _LOCAL_HOSTS and "sslmode" not in url.query:
        url = url.update_query_dict({"sslmode": "require"})
    return url


engine = create_async_engine(
    _normalise_url(settings.database_url),
    echo=settings.database_echo,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncSession:
    """Yield an async database session."""
    async with async_session() as session:
        yield session
