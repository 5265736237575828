"""AuditService: append-only audit trail for workflow changes."""

from __future__ import annotations

import enum
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.ext.asyncio import AsyncSession

from flowmarine.models.audit import AuditLog
from flowmarine.models.enums import AuditAction

logger = logging.getLogger(__name__)


def to_json_safe(value: Any) -> Any:
    """Convert UUIDs, datetimes, Decimals and enums into JSONB-friendly values."""
    if isinstance(value, dict):
        return {str(k): to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_json_safe(v) for v in value]
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    return value


def snapshot(instance: Any) -> dict:
    """Column values of an ORM instance as a JSON-safe dict.

    Non-mapped objects (e.g. test doubles) fall back to their ``__dict__``.
    """
    try:
        mapper = sa_inspect(instance).mapper
    except NoInspectionAvailable:
        return to_json_safe(
            {k: v for k, v in vars(instance).items() if not k.startswith("_")}
        )
    return to_json_safe(
        {attr.key: getattr(instance, attr.key) for attr in mapper.column_attrs}
    )


class AuditService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def log(
        self,
        user_id: uuid.UUID | None,
        action: AuditAction,
        resource: str,
        resource_id: uuid.UUID | str | None = None,
        old_values: dict | None = None,
        new_values: dict | None = None,
        metadata: dict | None = None,
    ) -> AuditLog:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            resource=resource,
            resource_id=str(resource_id) if resource_id is not None else None,
            old_values=to_json_safe(old_values) if old_values is not None else None,
            new_values=to_json_safe(new_values) if new_values is not None else None,
            metadata_extra=to_json_safe(metadata or {}),
        )
        self.db.add(entry)
        await self.db.flush()
        logger.debug(
            "Audit %s %s/%s by %s", action.value, resource, resource_id, user_id
        )
        return entry
