"""Development provider: writes messages to the log instead of sending them."""

from __future__ import annotations

import logging
import uuid

from flowmarine.modules.notifications.providers.base import (
    EmailMessage,
    EmailProviderBase,
)

logger = logging.getLogger(__name__)


class LogEmailProvider(EmailProviderBase):
    async def send(self, message: EmailMessage) -> str:
        message_id = f"log-{uuid.uuid4()}"
        logger.info(
            "Email [%s] to=%s subject=%r id=%s", message.type, message.to, message.subject, message_id
        )
        return message_id

    async def health_check(self) -> bool:
        return True
