from flowmarine.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from flowmarine.database.engine import async_session, engine, sync_engine
from flowmarine.database.session import get_db

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "async_session",
    "engine",
    "sync_engine",
    "get_db",
]
