"""Tests for RFQ statistics aggregation."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from flowmarine.models.enums import RfqStatus
from flowmarine.modules.rfq import statistics
from flowmarine.modules.rfq.rfq_service import RfqService

ISSUED = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _rfq(status, days_to_update=0.0, vendors=()):
    return SimpleNamespace(
        status=status,
        issue_date=ISSUED,
        updated_at=ISSUED + timedelta(days=days_to_update),
        vendors=list(vendors),
    )


def _link(vendor_id, name):
    return SimpleNamespace(vendor_id=vendor_id, vendor=SimpleNamespace(name=name))


class TestCountByStatus:
    def test_every_status_present(self):
        counts = statistics.count_by_status([
            _rfq(RfqStatus.DRAFT),
            _rfq(RfqStatus.DRAFT),
            _rfq(RfqStatus.SENT),
        ])
        assert counts == {
            "draft": 2,
            "sent": 1,
            "responses_received": 0,
            "evaluated": 0,
            "awarded": 0,
            "cancelled": 0,
        }


class TestAverageResponseTime:
    def test_zero_without_responses(self):
        assert statistics.calculate_average_response_time([_rfq(RfqStatus.SENT, 3)]) == 0

    def test_partial_days_round_up_before_averaging(self):
        rfqs = [
            _rfq(RfqStatus.RESPONSES_RECEIVED, 1.2),  # 2 days
            _rfq(RfqStatus.AWARDED, 3.0),  # 3 days
            _rfq(RfqStatus.EVALUATED, 5.5),  # 6 days
            _rfq(RfqStatus.CANCELLED, 30),
        ]
        assert statistics.calculate_average_response_time(rfqs) == 4

    def test_half_day_average_rounds_up(self):
        rfqs = [_rfq(RfqStatus.AWARDED, 2.0), _rfq(RfqStatus.AWARDED, 3.0)]
        assert statistics.calculate_average_response_time(rfqs) == 3


class TestTopVendors:
    def test_ranked_by_participation(self):
        a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        rfqs = [
            _rfq(RfqStatus.SENT, vendors=[_link(a, "Alpha"), _link(b, "Bravo")]),
            _rfq(RfqStatus.SENT, vendors=[_link(b, "Bravo")]),
            _rfq(RfqStatus.DRAFT, vendors=[_link(b, "Bravo"), _link(c, "Charlie")]),
        ]

        top = statistics.top_vendors_by_participation(rfqs)

        assert top[0] == {"vendor_id": b, "name": "Bravo", "count": 3}
        assert {entry["vendor_id"] for entry in top[1:]} == {a, c}

    def test_limit(self):
        rfqs = [_rfq(RfqStatus.SENT, vendors=[_link(uuid.uuid4(), f"V{i}") for i in range(12)])]
        assert len(statistics.top_vendors_by_participation(rfqs)) == 10


class TestServiceStatistics:
    @pytest.mark.asyncio
    async def test_combines_aggregates(self, mock_db):
        service = RfqService(mock_db)
        rfqs = [_rfq(RfqStatus.AWARDED, 2), _rfq(RfqStatus.DRAFT)]
        service.get_rfqs = AsyncMock(return_value=rfqs)
        vessel_id = uuid.uuid4()

        stats = await service.get_rfq_statistics(vessel_id=vessel_id)

        service.get_rfqs.assert_awaited_once_with(vessel_id=vessel_id, date_from=None, date_to=None)
        assert stats["total"] == 2
        assert stats["by_status"]["awarded"] == 1
        assert stats["average_response_time"] == 2
        assert stats["top_vendors_by_participation"] == []
