"""Pydantic schemas for owner profiles."""

from typing import Optional

from pydantic import BaseModel, Field

from ..common.schemas import TimestampSchema


class ProfileUpdate(BaseModel):
    """Fields to change; omitted fields stay as they are, blank strings clear them."""

    openai_api_key: Optional[str] = Field(default=None, description="Provider API key")
    system_prompt: Optional[str] = Field(default=None, description="Base instruction text for chat answers")


class ProfileRead(TimestampSchema):
    """Profile as shown to its owner. The key itself is never returned."""

    owner_id: str
    has_api_key: bool
    api_key_last4: Optional[str] = None
    system_prompt: Optional[str] = None


class ConnectionTestRequest(BaseModel):
    api_key: Optional[str] = Field(default=None, description="Key to test; the stored key is used when omitted")


class ConnectionTestResponse(BaseModel):
    ok: bool
    model: str


class ProfileCreateInternal(BaseModel):
    owner_id: str
