"""Pydantic schemas for chunk entities."""

from typing import List

from pydantic import BaseModel, ConfigDict

from ..common.schemas import TimestampSchema


class ChunkRead(TimestampSchema):
    """A stored chunk without its embedding vector."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    document_id: int
    chunk_index: int
    content: str


class ChunkListResponse(BaseModel):
    data: List[ChunkRead]
    total_count: int
    has_more: bool
    page: int
    items_per_page: int
