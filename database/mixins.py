from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, func, String
from sqlalchemy import TypeDecorator
import uuid


class OpaqueId(TypeDecorator):
    """Opaque identifier stored as a 36-char string.
    Works the same on PostgreSQL, Oracle and SQLite.
    """
    impl = String
    cache_ok = True

    def __init__(self, length=36, *args, **kwargs):
        super().__init__(length, *args, **kwargs)

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        return value


def generate_id() -> str:
    """Collision-resistant identifier, never sequential."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamps"""
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)


class OpaqueIdMixin:
    """Mixin to add an opaque UUID string primary key"""
    id = Column(OpaqueId(), primary_key=True, default=generate_id, index=True)
