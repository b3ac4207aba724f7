"""Schemas for retrieved chunks and the citations built from them."""

from typing import List

from pydantic import BaseModel, Field


class RetrievedChunk(BaseModel):
    """A chunk returned by similarity search, in rank order."""

    chunk_id: int
    document_id: int
    chunk_index: int
    content: str
    similarity: float


class CitationRecord(BaseModel):
    """A numbered source the answer may cite as ``[n]``."""

    n: int = Field(description="1-based citation number")
    chunk_id: int
    document_id: int
    document_name: str
    chunk_index: int
    similarity: float
    snippet: str = Field(description="Leading characters of the chunk for display")
    content: str = Field(description="Full chunk text")


class AssembledPrompt(BaseModel):
    system_prompt: str
    citations: List[CitationRecord]
