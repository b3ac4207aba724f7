"""Schemas for a single chat turn."""

from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, field_validator

from ...infrastructure.completion import TokenUsage
from ..retrieval.schemas import CitationRecord


class ChatTurnRequest(BaseModel):
    """A user question and the options for answering it."""

    message: Annotated[str, Field(min_length=1, description="The user's question")]
    model: Optional[str] = Field(default=None, description="Chat model id; blank or unknown ids use the default model")
    top_k: Optional[int] = Field(default=None, description="Number of chunks to retrieve, clamped to 1..10 (default 6)")

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("message must not be blank")
        return cleaned


class ChatTurnResult(BaseModel):
    """The stored answer of a chat turn with the sources it was given."""

    chat_id: int
    model: str
    answer: str
    citations: List[CitationRecord]
    usage: Optional[TokenUsage] = None
    user_message_id: int
    assistant_message_id: int
