"""
Column types and mixins shared by the credential and client tables.

``subscriptions`` and ``manual_credentials`` hold JSON documents, which are
native JSONB on PostgreSQL and serialized text on SQLite.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator

from ..utils.json_utils import dumps, loads


def utc_now() -> datetime:
    return datetime.now(UTC)


class JSON(TypeDecorator):
    """JSONB on PostgreSQL, JSON text on every other dialect."""

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        native = dialect.name == "postgresql"
        return dialect.type_descriptor(JSONB() if native else Text())

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return dumps(value)

    def process_result_value(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return loads(value)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)


class UUIDMixin:
    """String primary key, a random UUID unless the caller supplies one."""

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
