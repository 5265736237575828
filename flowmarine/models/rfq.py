from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flowmarine.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from flowmarine.models.enums import RfqStatus

if TYPE_CHECKING:
    from flowmarine.models.quote import Quote
    from flowmarine.models.requisition import Requisition
    from flowmarine.models.rfq_vendor import RfqVendor


class Rfq(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "rfqs"

    # RFQ-<year>-<NNNN>; uniqueness backs the count-based numbering
    rfq_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    # One RFQ per requisition is checked by the service, not by the schema
    requisition_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("requisitions.id", ondelete="RESTRICT"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[RfqStatus] = mapped_column(
        SQLAlchemyEnum(RfqStatus, name="rfqstatus", create_type=False),
        nullable=False,
        server_default="DRAFT",
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, server_default="USD"
    )
    delivery_location: Mapped[str | None] = mapped_column(String(255))
    delivery_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    response_deadline: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    issue_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancellation_reason: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))

    # Relationships (lazy="noload"; callers opt in with loader options)
    requisition: Mapped[Requisition] = relationship("Requisition", lazy="noload")
    vendors: Mapped[list[RfqVendor]] = relationship(
        "RfqVendor", back_populates="rfq", lazy="noload", cascade="all, delete-orphan"
    )
    quotes: Mapped[list[Quote]] = relationship(
        "Quote", back_populates="rfq", lazy="noload"
    )

    __table_args__ = (
        Index("ix_rfqs_requisition_id", "requisition_id"),
        Index("ix_rfqs_status", "status"),
        Index("ix_rfqs_created_at", "created_at"),
    )
