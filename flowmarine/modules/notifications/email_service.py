"""EmailService: renders and sends vendor-facing workflow emails."""

from __future__ import annotations

import logging

from flowmarine.modules.notifications.providers.base import (
    EmailDeliveryError,
    EmailMessage,
    EmailProviderBase,
)
from flowmarine.modules.notifications.providers.factory import get_email_provider

logger = logging.getLogger(__name__)

RFQ_NOTIFICATION_TYPE = "rfq_notification"

_RFQ_BODY_TEMPLATE = """Dear {recipient_name},

You have received a new Request for Quotation (RFQ) from FlowMarine.

RFQ Details:
- RFQ Number: {rfq_number}
- Title: {title}
- Vessel: {vessel_name}
- Delivery Location: {delivery_location}
- Delivery Date: {delivery_date}
- Response Deadline: {response_deadline}

Please log in to the FlowMarine vendor portal to view the complete RFQ details and submit your quotation.

Best regards,
FlowMarine Procurement Team
"""


def vendor_email_address(vendor) -> str | None:
    """The address RFQs go to: the contact email, else the company email."""
    return vendor.contact_email or vendor.email or None


def build_rfq_notification(rfq, vendor) -> EmailMessage:
    """Render the RFQ invitation for one vendor.

    Raises EmailDeliveryError when the vendor has no usable address.
    """
    address = vendor_email_address(vendor)
    if not address:
        raise EmailDeliveryError("Vendor has no email address")

    requisition = getattr(rfq, "requisition", None)
    vessel = getattr(requisition, "vessel", None) if requisition is not None else None

    body = _RFQ_BODY_TEMPLATE.format(
        recipient_name=vendor.contact_person_name or vendor.name,
        rfq_number=rfq.rfq_number,
        title=rfq.title,
        vessel_name=vessel.name if vessel is not None else "N/A",
        delivery_location=rfq.delivery_location or "TBD",
        delivery_date=rfq.delivery_date.strftime("%a %b %d %Y") if rfq.delivery_date else "TBD",
        response_deadline=rfq.response_deadline.strftime("%a %b %d %Y"),
    )
    return EmailMessage(
        to=address,
        subject=f"New RFQ: {rfq.title} - {rfq.rfq_number}",
        body=body,
        type=RFQ_NOTIFICATION_TYPE,
    )


class EmailService:
    def __init__(self, provider: EmailProviderBase | None = None) -> None:
        self.provider = provider or get_email_provider()

    async def send_email(self, message: EmailMessage) -> str:
        """Hand a message to the provider; provider errors become EmailDeliveryError."""
        try:
            message_id = await self.provider.send(message)
        except EmailDeliveryError:
            raise
        except Exception as exc:
            raise EmailDeliveryError(str(exc)) from exc
        logger.info("Sent %s email to %s (id=%s)", message.type, message.to, message_id)
        return message_id

    async def send_rfq_notification(self, rfq, vendor) -> str:
        return await self.send_email(build_rfq_notification(rfq, vendor))
