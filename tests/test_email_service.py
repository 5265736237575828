"""Tests for RFQ email rendering, EmailService and the mail providers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from flowmarine.modules.notifications.email_service import (
    RFQ_NOTIFICATION_TYPE,
    EmailService,
    build_rfq_notification,
    vendor_email_address,
)
from flowmarine.modules.notifications.providers import factory
from flowmarine.modules.notifications.providers.base import EmailDeliveryError, EmailMessage
from flowmarine.modules.notifications.providers.http_api import HttpEmailProvider
from flowmarine.modules.notifications.providers.log_only import LogEmailProvider


def _rfq(delivery_date=None, vessel_name="MV Ocean Star"):
    vessel = SimpleNamespace(name=vessel_name) if vessel_name else None
    return SimpleNamespace(
        rfq_number="RFQ-2026-0012",
        title="Main engine spares",
        delivery_location="Singapore SGSIN, Singapore",
        delivery_date=delivery_date,
        response_deadline=datetime(2026, 11, 3, tzinfo=UTC),
        requisition=SimpleNamespace(vessel=vessel),
    )


def _vendor(email="sales@vendor.test", contact_email=None, contact_person_name=None):
    return SimpleNamespace(
        name="Harbour Marine Supply",
        email=email,
        contact_email=contact_email,
        contact_person_name=contact_person_name,
    )


class TestBuildRfqNotification:
    def test_subject_and_recipient(self):
        message = build_rfq_notification(_rfq(), _vendor())
        assert message.subject == "New RFQ: Main engine spares - RFQ-2026-0012"
        assert message.to == "sales@vendor.test"
        assert message.type == RFQ_NOTIFICATION_TYPE

    def test_body_details(self):
        message = build_rfq_notification(
            _rfq(delivery_date=datetime(2026, 11, 10, tzinfo=UTC)),
            _vendor(contact_person_name="Mei Tan"),
        )
        assert "Dear Mei Tan" in message.body
        assert "RFQ Number: RFQ-2026-0012" in message.body
        assert "Vessel: MV Ocean Star" in message.body
        assert "Delivery Date: Tue Nov 10 2026" in message.body
        assert "Response Deadline: Tue Nov 03 2026" in message.body

    def test_missing_delivery_date_and_vessel(self):
        message = build_rfq_notification(_rfq(vessel_name=None), _vendor())
        assert "Delivery Date: TBD" in message.body
        assert "Vessel: N/A" in message.body
        assert "Dear Harbour Marine Supply" in message.body

    def test_contact_email_preferred(self):
        vendor = _vendor(email="info@vendor.test", contact_email="rfq@vendor.test")
        assert vendor_email_address(vendor) == "rfq@vendor.test"

    def test_vendor_without_address_fails(self):
        with pytest.raises(EmailDeliveryError, match="no email address"):
            build_rfq_notification(_rfq(), _vendor(email=None))


class TestEmailService:
    @pytest.mark.asyncio
    async def test_returns_provider_message_id(self):
        service = EmailService(provider=LogEmailProvider())
        message_id = await service.send_email(EmailMessage(to="a@b.test", subject="s", body="b"))
        assert message_id.startswith("log-")

    @pytest.mark.asyncio
    async def test_unexpected_provider_error_becomes_delivery_error(self):
        provider = MagicMock()
        provider.send = AsyncMock(side_effect=ValueError("bad payload"))
        service = EmailService(provider=provider)

        with pytest.raises(EmailDeliveryError, match="bad payload"):
            await service.send_rfq_notification(_rfq(), _vendor())


class TestHttpEmailProvider:
    @pytest.mark.asyncio
    async def test_posts_message(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(202, json={"id": "msg-42"})

        provider = HttpEmailProvider(
            base_url="https://mail.test",
            api_key="key-123",
            from_address="rfq@flowmarine.test",
            transport=httpx.MockTransport(handler),
            backoff_seconds=0,
        )
        message_id = await provider.send(
            EmailMessage(to="v@vendor.test", subject="New RFQ", body="hello", type="rfq_notification")
        )
        await provider.aclose()

        assert message_id == "msg-42"
        assert seen[0].url.path == "/v1/messages"
        assert seen[0].headers["Authorization"] == "Bearer key-123"
        payload = json.loads(seen[0].content)
        assert payload["to"] == "v@vendor.test"
        assert payload["from"] == "rfq@flowmarine.test"
        assert payload["tags"] == ["rfq_notification"]

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        responses = iter([httpx.Response(503), httpx.Response(429), httpx.Response(200, json={"id": "ok"})])
        provider = HttpEmailProvider(
            base_url="https://mail.test",
            transport=httpx.MockTransport(lambda request: next(responses)),
            backoff_seconds=0,
        )

        assert await provider.send(EmailMessage(to="v@vendor.test", subject="s", body="b")) == "ok"
        await provider.aclose()

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(422)

        provider = HttpEmailProvider(
            base_url="https://mail.test",
            transport=httpx.MockTransport(handler),
            backoff_seconds=0,
        )

        with pytest.raises(EmailDeliveryError, match="HTTP 422"):
            await provider.send(EmailMessage(to="v@vendor.test", subject="s", body="b"))
        await provider.aclose()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_transport_errors(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = HttpEmailProvider(
            base_url="https://mail.test",
            transport=httpx.MockTransport(handler),
            backoff_seconds=0,
        )

        with pytest.raises(EmailDeliveryError, match="unreachable"):
            await provider.send(EmailMessage(to="v@vendor.test", subject="s", body="b"))
        await provider.aclose()


class TestProviderFactory:
    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="No email adapter"):
            factory.get_email_provider("carrier-pigeon")

    def test_cached_instances(self):
        assert factory.get_email_provider("log") is factory.get_email_provider("log")
