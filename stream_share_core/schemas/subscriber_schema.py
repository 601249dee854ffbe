"""
Pydantic schemas for subscribers (client rows).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.time_utils import ensure_utc, utc_now
from .mixins import IdMixin, OptionalIdMixin, TimestampMixin


class SubscriberBase(BaseModel):
    """Fields shared by every subscriber schema."""

    phone_number: str = Field(min_length=1, max_length=32, description="Stable external key")
    client_name: Optional[str] = Field(default=None, max_length=200)

    # Raw polymorphic field; see distribution.subscriptions for the accepted encodings
    subscriptions: Any = Field(default_factory=list, description="Subscribed services")
    purchase_date: datetime = Field(
        default_factory=utc_now, description="Default activation for every subscription entry"
    )
    duration_months: int = Field(default=1, ge=0, description="Applies to every entry")

    deleted: bool = False
    is_debtor: bool = False
    is_contacted: bool = False
    manual_credentials: Dict[str, str] = Field(
        default_factory=dict, description="Operator pins: service name -> credential id"
    )

    model_config = ConfigDict(from_attributes=True)

    @field_validator("purchase_date")
    @classmethod
    def normalize_purchase_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("manual_credentials", mode="before")
    @classmethod
    def default_manual_credentials(cls, v: Any) -> Any:
        return v or {}

    @field_validator("is_debtor", "is_contacted", "deleted", mode="before")
    @classmethod
    def default_flags(cls, v: Any) -> Any:
        return bool(v)


class SubscriberCreate(OptionalIdMixin, SubscriberBase):
    """Upsert payload for a subscriber row."""


class SubscriberRead(TimestampMixin, SubscriberBase, IdMixin):
    """A stored subscriber row as the distribution engine sees it."""


class SubscriptionDetail(BaseModel):
    """Per-service detail on a merged subscriber profile."""

    purchase_date: datetime
    duration_months: int
    is_debtor: bool


class SubscriberProfile(BaseModel):
    """All rows stored under one phone number, merged into one view."""

    id: str
    phone_number: str
    name: str
    purchase_date: datetime
    duration_months: int
    services: List[str]
    subscription_details: Dict[str, SubscriptionDetail]
    is_debtor: bool
    manual_credentials: Dict[str, str]
