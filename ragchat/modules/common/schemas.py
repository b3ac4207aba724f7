"""Shared pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class TimestampSchema(BaseModel):
    """Timestamps carried by every persisted entity."""

    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp (UTC)")
