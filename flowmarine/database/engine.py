"""Async engine for the API and Celery workers; sync engine for Alembic."""

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from flowmarine.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    pool_pre_ping=True,
    pool_recycle=3600,
    echo=settings.database_echo,
)

# Rows stay loaded after commit: distribute_rfq commits the vendor links and
# then builds emails from the same RFQ and vendor objects.
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

# Migrations hold a single connection for the whole run
sync_engine = create_engine(settings.database_url_sync, poolclass=NullPool)
