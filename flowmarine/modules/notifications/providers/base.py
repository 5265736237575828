"""Abstract base class for outbound email providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class EmailMessage:
    to: str
    subject: str
    body: str
    type: str = "generic"


class EmailDeliveryError(Exception):
    """Raised when a message could not be handed to the mail provider."""


class EmailProviderBase(ABC):
    @abstractmethod
    async def send(self, message: EmailMessage) -> str:
        """Deliver a message and return the provider's message id."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the provider is reachable and authenticated."""

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
