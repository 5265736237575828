"""Vessel model: the fleet registry requisitions are raised against."""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from flowmarine.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Vessel(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "vessels"

    imo_number: Mapped[str] = mapped_column(String(7), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    flag_state: Mapped[str | None] = mapped_column(String(3))  # ISO alpha-3
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default="true"
    )

    __table_args__ = (
        CheckConstraint("imo_number ~ '^[0-9]{7}$'", name="ck_vessels_imo_format"),
    )
