"""
Storage model for paying subscribers ("clients").
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from .db_base import JSON, TimestampMixin, UUIDMixin, utc_now
from .db_config import Base


class Client(Base, UUIDMixin, TimestampMixin):
    """
    One subscriber row.

    ``subscriptions`` keeps whatever encoding the row was written with: a
    JSON list of ``service`` / ``service|timestamp`` strings, or one of the
    legacy single / comma-joined / plus-joined strings.
    """

    __tablename__ = "clients"

    phone_number = Column(String(32), nullable=False, index=True)
    client_name = Column(String(200), nullable=True)

    subscriptions = Column(JSON, nullable=True)
    purchase_date = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    duration_months = Column(Integer, default=1, nullable=False)

    deleted = Column(Boolean, default=False, nullable=False)
    is_debtor = Column(Boolean, default=False, nullable=False)
    is_contacted = Column(Boolean, default=False, nullable=False)

    # Operator pins: service name -> credential id
    manual_credentials = Column(JSON, nullable=True)
