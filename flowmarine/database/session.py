import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from flowmarine.database.engine import async_session

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session.

    Whatever the handler flushed (RFQ rows, vendor links, audit entries) is
    committed once it returns, and rolled back together if it raises.
    """
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception as exc:
            logger.debug("Rolling back request session after %s", type(exc).__name__)
            await session.rollback()
            raise
