"""Celery tasks for RFQ vendor notifications."""

from __future__ import annotations

import asyncio
import logging
import uuid

from celery_app import celery
from flowmarine.database.engine import async_session, engine
from flowmarine.modules.notifications.providers.factory import close_all_providers

logger = logging.getLogger(__name__)


async def _retry_failed_notifications_async(rfq_id: str | None = None) -> dict:
    """Re-send FAILED vendor notifications for RFQs still in SENT."""
    from flowmarine.modules.rfq.rfq_service import RfqService

    try:
        async with async_session() as session:
            svc = RfqService(session)
            stats = await svc.retry_failed_notifications(
                rfq_id=uuid.UUID(rfq_id) if rfq_id else None
            )
            await session.commit()
    finally:
        # Pooled connections and httpx clients are bound to this asyncio.run() loop
        await close_all_providers()
        await engine.dispose()

    if stats["checked"]:
        logger.info(
            "Notification retry: %d checked, %d sent, %d failed",
            stats["checked"], stats["sent"], stats["failed"],
        )
    return stats


@celery.task(name="flowmarine.modules.rfq.tasks.retry_failed_notifications")
def retry_failed_notifications(rfq_id: str | None = None) -> dict:
    """Periodic sweep (or one-off for a single RFQ) of failed RFQ emails."""
    return asyncio.run(_retry_failed_notifications_async(rfq_id))
