from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flowmarine.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from flowmarine.models.enums import RequisitionStatus

if TYPE_CHECKING:
    from flowmarine.models.vessel import Vessel


class Requisition(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "requisitions"

    requisition_number: Mapped[str] = mapped_column(
        String(30), nullable=False, unique=True
    )
    vessel_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vessels.id", ondelete="RESTRICT"),
        nullable=False,
    )
    status: Mapped[RequisitionStatus] = mapped_column(
        SQLAlchemyEnum(RequisitionStatus, name="requisitionstatus", create_type=False),
        nullable=False,
        server_default="DRAFT",
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, server_default="USD"
    )
    delivery_location: Mapped[str | None] = mapped_column(String(255))
    delivery_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    justification: Mapped[str | None] = mapped_column(Text)
    requested_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))

    vessel: Mapped[Vessel] = relationship("Vessel", lazy="noload")
    items: Mapped[list[RequisitionItem]] = relationship(
        "RequisitionItem",
        back_populates="requisition",
        lazy="noload",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_requisitions_vessel_id", "vessel_id"),
        Index("ix_requisitions_status", "status"),
    )


class RequisitionItem(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "requisition_items"

    requisition_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("requisitions.id", ondelete="CASCADE"),
        nullable=False,
    )
    impa_code: Mapped[str | None] = mapped_column(String(10))
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    unit_of_measure: Mapped[str] = mapped_column(String(20), nullable=False)
    specifications: Mapped[str | None] = mapped_column(Text)

    requisition: Mapped[Requisition] = relationship(
        "Requisition", back_populates="items", lazy="noload"
    )

    __table_args__ = (
        Index("ix_requisition_items_requisition_id", "requisition_id"),
    )
