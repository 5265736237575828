"""Vendor registry: the suppliers RFQs are distributed to.

Read-only from the RFQ workflow's point of view.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Index, Numeric, String
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flowmarine.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Vendor(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vendors"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String(255))
    contact_email: Mapped[str | None] = mapped_column(String(255))
    contact_person_name: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default="true"
    )
    is_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default="false"
    )
    # 0-10 composite performance rating
    overall_score: Mapped[Decimal | None] = mapped_column(Numeric(4, 2))

    service_areas: Mapped[list[VendorServiceArea]] = relationship(
        "VendorServiceArea",
        back_populates="vendor",
        lazy="noload",
        cascade="all, delete-orphan",
    )
    port_capabilities: Mapped[list[VendorPortCapability]] = relationship(
        "VendorPortCapability",
        back_populates="vendor",
        lazy="noload",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index(
            "ix_vendors_eligible",
            "overall_score",
            postgresql_where="is_active AND is_approved",
        ),
    )


class VendorServiceArea(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vendor_service_areas"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
    )
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    region: Mapped[str | None] = mapped_column(String(100))
    ports: Mapped[list[str]] = mapped_column(
        ARRAY(String(10)), nullable=False, server_default="{}"
    )  # UN/LOCODEs

    vendor: Mapped[Vendor] = relationship(
        "Vendor", back_populates="service_areas", lazy="noload"
    )

    __table_args__ = (
        Index("ix_vendor_service_areas_vendor_id", "vendor_id"),
        Index("ix_vendor_service_areas_country", "country"),
        Index("ix_vendor_service_areas_ports", "ports", postgresql_using="gin"),
    )


class VendorPortCapability(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vendor_port_capabilities"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
    )
    port_code: Mapped[str] = mapped_column(String(10), nullable=False)
    capabilities: Mapped[list[str]] = mapped_column(
        ARRAY(String(50)), nullable=False, server_default="{}"
    )

    vendor: Mapped[Vendor] = relationship(
        "Vendor", back_populates="port_capabilities", lazy="noload"
    )

    __table_args__ = (
        Index("ix_vendor_port_capabilities_vendor_id", "vendor_id"),
        Index(
            "ix_vendor_port_capabilities_capabilities",
            "capabilities",
            postgresql_using="gin",
        ),
    )
