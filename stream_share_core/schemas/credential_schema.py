"""
Pydantic schemas for shared streaming credentials.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.time_utils import ensure_utc, utc_now
from .mixins import IdMixin, OptionalIdMixin, TimestampMixin


class CredentialBase(BaseModel):
    """Fields shared by every credential schema."""

    service: str = Field(min_length=1, max_length=100, description="Streaming service name")
    email: str = Field(min_length=1, max_length=255, description="Account identifier")
    password: str = Field(min_length=1, max_length=255, description="Account secret")
    published_at: datetime = Field(
        default_factory=utc_now, description="When the login was created; drives aging"
    )
    is_visible: bool = Field(default=True, description="Hidden credentials are never assigned")

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    @field_validator("published_at")
    @classmethod
    def normalize_published_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class CredentialCreate(OptionalIdMixin, CredentialBase):
    """Upsert payload for a credential."""


class CredentialRead(TimestampMixin, CredentialBase, IdMixin):
    """A stored credential as the distribution engine sees it."""

    model_config = ConfigDict(from_attributes=True)
