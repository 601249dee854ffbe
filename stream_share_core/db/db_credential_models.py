"""
Storage model for shared streaming-service logins.

Just the data structure - distribution and aging logic live in
``stream_share_core.distribution``.
"""

from sqlalchemy import Boolean, Column, DateTime, Index, String

from .db_base import TimestampMixin, UUIDMixin, utc_now
from .db_config import Base


class StreamingCredential(Base, UUIDMixin, TimestampMixin):
    """A login shared by the subscribers of one streaming service."""

    __tablename__ = "credentials"

    service = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    password = Column(String(255), nullable=False)

    # Sole input to credential aging; never recomputed
    published_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Hidden credentials stay stored but are never assigned
    is_visible = Column(Boolean, default=True, nullable=False)

    __table_args__ = (Index("ix_credentials_service_published", "service", "published_at"),)
