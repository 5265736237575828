from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flowmarine.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from flowmarine.models.enums import QuoteStatus

if TYPE_CHECKING:
    from flowmarine.models.rfq import Rfq
    from flowmarine.models.vendor import Vendor


class Quote(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "quotes"

    rfq_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("rfqs.id", ondelete="CASCADE"),
        nullable=False,
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
    )
    quote_number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    status: Mapped[QuoteStatus] = mapped_column(
        SQLAlchemyEnum(QuoteStatus, name="quotestatus", create_type=False),
        nullable=False,
        server_default="SUBMITTED",
    )
    total_amount: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, server_default="USD"
    )
    valid_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    delivery_days: Mapped[int | None] = mapped_column(Integer)
    payment_terms: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    rfq: Mapped[Rfq] = relationship("Rfq", back_populates="quotes", lazy="noload")
    vendor: Mapped[Vendor] = relationship("Vendor", lazy="noload")
    line_items: Mapped[list[QuoteLineItem]] = relationship(
        "QuoteLineItem", back_populates="quote", lazy="noload", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "total_amount IS NULL OR total_amount >= 0",
            name="ck_quotes_total_amount_non_negative",
        ),
        Index("ix_quotes_rfq_id", "rfq_id"),
        Index("ix_quotes_vendor_id", "vendor_id"),
    )


class QuoteLineItem(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "quote_line_items"

    quote_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
    )
    requisition_item_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("requisition_items.id", ondelete="SET NULL"),
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    lead_time_days: Mapped[int | None] = mapped_column(Integer)

    quote: Mapped[Quote] = relationship(
        "Quote", back_populates="line_items", lazy="noload"
    )

    __table_args__ = (
        CheckConstraint("unit_price >= 0", name="ck_quote_line_items_unit_price_non_negative"),
        CheckConstraint("quantity > 0", name="ck_quote_line_items_quantity_positive"),
        Index("ix_quote_line_items_quote_id", "quote_id"),
    )
