"""Tests for the RFQ notification retry Celery task."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

from flowmarine.modules.rfq import tasks


def _session_factory(session):
    @asynccontextmanager
    async def factory():
        yield session

    return factory


class TestRetryFailedNotificationsTask:
    def test_runs_service_and_commits(self):
        session = MagicMock()
        session.commit = AsyncMock()
        stats = {"checked": 2, "sent": 2, "failed": 0}

        with (
            patch.object(tasks, "async_session", _session_factory(session)),
            patch.object(tasks, "close_all_providers", AsyncMock()) as close_providers,
            patch.object(tasks, "engine") as engine,
            patch("flowmarine.modules.rfq.rfq_service.RfqService") as svc_cls,
        ):
            engine.dispose = AsyncMock()
            svc_cls.return_value.retry_failed_notifications = AsyncMock(return_value=stats)
            result = tasks.retry_failed_notifications()

        assert result == stats
        svc_cls.return_value.retry_failed_notifications.assert_awaited_once_with(rfq_id=None)
        session.commit.assert_awaited_once()
        close_providers.assert_awaited_once()
        engine.dispose.assert_awaited_once()

    def test_single_rfq(self):
        session = MagicMock()
        session.commit = AsyncMock()
        rfq_id = uuid.uuid4()

        with (
            patch.object(tasks, "async_session", _session_factory(session)),
            patch.object(tasks, "close_all_providers", AsyncMock()),
            patch.object(tasks, "engine") as engine,
            patch("flowmarine.modules.rfq.rfq_service.RfqService") as svc_cls,
        ):
            engine.dispose = AsyncMock()
            svc_cls.return_value.retry_failed_notifications = AsyncMock(
                return_value={"checked": 0, "sent": 0, "failed": 0}
            )
            tasks.retry_failed_notifications(str(rfq_id))

        svc_cls.return_value.retry_failed_notifications.assert_awaited_once_with(rfq_id=rfq_id)
