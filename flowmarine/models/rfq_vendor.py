"""RfqVendor: which vendors an RFQ was sent to, and how their notification went.

The notification columns double as the delivery outbox: rows left in FAILED
are picked up by the retry task.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flowmarine.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from flowmarine.models.enums import NotificationStatus

if TYPE_CHECKING:
    from flowmarine.models.rfq import Rfq
    from flowmarine.models.vendor import Vendor


class RfqVendor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "rfq_vendors"

    rfq_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("rfqs.id", ondelete="CASCADE"),
        nullable=False,
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vendors.id", ondelete="RESTRICT"),
        nullable=False,
    )
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notification_status: Mapped[NotificationStatus] = mapped_column(
        SQLAlchemyEnum(NotificationStatus, name="notificationstatus", create_type=False),
        nullable=False,
        server_default="PENDING",
    )
    notification_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="0"
    )
    notified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_notification_error: Mapped[str | None] = mapped_column(Text)

    rfq: Mapped[Rfq] = relationship("Rfq", back_populates="vendors", lazy="noload")
    vendor: Mapped[Vendor] = relationship("Vendor", lazy="noload")

    __table_args__ = (
        UniqueConstraint("rfq_id", "vendor_id", name="uq_rfq_vendors_rfq_vendor"),
        Index("ix_rfq_vendors_vendor_id", "vendor_id"),
        Index(
            "ix_rfq_vendors_failed",
            "rfq_id",
            postgresql_where="notification_status = 'FAILED'",
        ),
    )
