"""Pydantic schemas for chat sessions and messages."""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..common.schemas import TimestampSchema
from .models import MessageRole


class ChatSessionCreateInternal(BaseModel):
    owner_id: str
    title: str


class ChatSessionRename(BaseModel):
    title: Annotated[str, Field(max_length=1000, description="New title, trimmed and cut to 120 characters")]


class ChatSessionRead(TimestampSchema):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: str
    title: str


class MessageCreateInternal(BaseModel):
    chat_id: int
    owner_id: str
    role: str
    content: str
    extra_metadata: Optional[Dict[str, Any]] = None


class MessageRead(TimestampSchema):
    """A stored message; ``metadata`` holds model, usage and citations for answers."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_id: int
    role: MessageRole
    content: str
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias=AliasChoices("extra_metadata", "metadata"))


class MessageListResponse(BaseModel):
    chat_id: int
    messages: List[MessageRead]


class ChatModelRead(BaseModel):
    id: str
    label: str
    input_per_1m: float
    output_per_1m: float


class ChatModelListResponse(BaseModel):
    models: List[ChatModelRead]
    default_model: str
