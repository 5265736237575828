"""Transactional mail delivery over an HTTP JSON API."""

from __future__ import annotations

import asyncio
import logging

import httpx

from flowmarine.config import settings
from flowmarine.modules.notifications.providers.base import (
    EmailDeliveryError,
    EmailMessage,
    EmailProviderBase,
)

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_RETRY_STATUSES = {429, 500, 502, 503, 504}
_BASE_BACKOFF_SECONDS = 1.0


class HttpEmailProvider(EmailProviderBase):
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        from_address: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        backoff_seconds: float = _BASE_BACKOFF_SECONDS,
    ) -> None:
        self.base_url = base_url or settings.email_api_base_url
        self.api_key = api_key if api_key is not None else settings.email_api_key
        self.from_address = from_address or settings.email_from_address
        self.backoff_seconds = backoff_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=settings.email_timeout_seconds,
                headers={"Authorization": f"Bearer {self.api_key}"},
                transport=self._transport,
            )
        return self._client

    async def _post_with_retry(self, path: str, payload: dict) -> httpx.Response:
        """POST with exponential backoff on throttling, 5xx and transport errors."""
        client = await self._get_client()

        for attempt in range(_MAX_RETRIES + 1):
            try:
                response = await client.post(path, json=payload)
            except httpx.RequestError as exc:
                if attempt >= _MAX_RETRIES:
                    raise EmailDeliveryError(f"Mail API unreachable: {exc}") from exc
                delay = self.backoff_seconds * (2 ** attempt)
                logger.warning(
                    "Mail API POST %s request error: %s, retrying in %.1fs", path, exc, delay
                )
                await asyncio.sleep(delay)
                continue

            if response.status_code < 400:
                return response
            if response.status_code not in _RETRY_STATUSES or attempt >= _MAX_RETRIES:
                raise EmailDeliveryError(
                    f"Mail API rejected message with HTTP {response.status_code}"
                )
            delay = self.backoff_seconds * (2 ** attempt)
            logger.warning(
                "Mail API POST %s returned %d, retrying in %.1fs (attempt %d/%d)",
                path, response.status_code, delay, attempt + 1, _MAX_RETRIES,
            )
            await asyncio.sleep(delay)

        raise EmailDeliveryError("Max retries exceeded for mail API request")

    async def send(self, message: EmailMessage) -> str:
        response = await self._post_with_retry(
            "/v1/messages",
            {
                "from": self.from_address,
                "to": message.to,
                "subject": message.subject,
                "text": message.body,
                "tags": [message.type],
            },
        )
        return str(response.json().get("id", ""))

    async def health_check(self) -> bool:
        try:
            client = await self._get_client()
            response = await client.get("/v1/health")
            return response.status_code == 200
        except httpx.HTTPError:
            logger.exception("Mail API health check failed")
            return False

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
