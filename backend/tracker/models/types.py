"""
Column types and helpers shared by the models; portable between SQLite and PostgreSQL.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, TypeDecorator


class UuidType(TypeDecorator):
    """UUID stored as string(36) so ids work unchanged on SQLite and PostgreSQL."""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


def utcnow() -> datetime:
    """Timezone-aware now; used for completion timestamps set by the application."""
    return datetime.now(timezone.utc)
