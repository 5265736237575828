from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from flowmarine.database.base import Base, UUIDPrimaryKeyMixin
from flowmarine.models.enums import AuditAction


class AuditLog(UUIDPrimaryKeyMixin, Base):
    """Append-only record of who changed what."""

    __tablename__ = "audit_logs"

    user_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True))
    action: Mapped[AuditAction] = mapped_column(
        SQLAlchemyEnum(AuditAction, name="auditaction", create_type=False),
        nullable=False,
    )
    resource: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(255))
    old_values: Mapped[dict | None] = mapped_column(JSONB)
    new_values: Mapped[dict | None] = mapped_column(JSONB)
    metadata_extra: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default="{}"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_audit_logs_resource", "resource", "resource_id"),
        Index("ix_audit_logs_created_at", "created_at"),
    )
