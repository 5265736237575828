"""Provider factory: select the mail adapter configured for this environment."""

from __future__ import annotations

from flowmarine.config import settings
from flowmarine.modules.notifications.providers.base import EmailProviderBase
from flowmarine.modules.notifications.providers.http_api import HttpEmailProvider
from flowmarine.modules.notifications.providers.log_only import LogEmailProvider

_instances: dict[str, EmailProviderBase] = {}


def get_email_provider(name: str | None = None) -> EmailProviderBase:
    name = name or settings.email_provider
    if name not in _instances:
        if name == "http":
            _instances[name] = HttpEmailProvider()
        elif name == "log":
            _instances[name] = LogEmailProvider()
        else:
            raise ValueError(f"No email adapter named: {name}")
    return _instances[name]


async def close_all_providers() -> None:
    """Close httpx clients on all cached providers.

    Must be called at the end of each asyncio.run() invocation in Celery tasks
    so clients never outlive their event loop.
    """
    for provider in _instances.values():
        await provider.aclose()
