"""
Common Pydantic schema mixins shared by credential and subscriber schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class IdMixin(BaseModel):
    """Mixin for schemas that include a unique identifier."""

    id: str = Field(..., description="Unique identifier for the record")


class OptionalIdMixin(BaseModel):
    """Mixin for upsert payloads: a blank or missing id means insert."""

    id: Optional[str] = Field(default=None, description="Existing record id, if updating")


class TimestampMixin(BaseModel):
    """Mixin for schemas that include creation and update timestamps."""

    created_at: Optional[datetime] = Field(
        default=None, description="Timestamp when the record was created"
    )
    updated_at: Optional[datetime] = Field(
        default=None, description="Timestamp when the record was last updated"
    )
