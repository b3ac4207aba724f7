"""Pydantic schemas for document entities."""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..common.schemas import TimestampSchema
from .models import DocumentSource, IngestionStatus


class DocumentCreate(BaseModel):
    """Request body for ingesting pasted text."""

    document_name: Optional[Annotated[str, Field(max_length=255, description="Display name, defaults to 'Untitled'")]] = None
    raw_text: Annotated[str, Field(min_length=1, description="Full document text")]

    @field_validator("raw_text")
    @classmethod
    def validate_raw_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("raw_text must not be blank")
        return v


class DocumentCreateInternal(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    owner_id: str
    document_name: str
    raw_text: str
    source: DocumentSource
    document_type: str = "text"
    ingestion_status: IngestionStatus = IngestionStatus.PROCESSING


class DocumentRead(TimestampSchema):
    """Document metadata as listed to its owner."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: str
    document_name: str
    source: DocumentSource
    document_type: str
    ingestion_status: IngestionStatus
    ingestion_error: Optional[str] = None
    chunk_count: int = Field(default=0, description="Number of stored chunks")


class DocumentDetail(DocumentRead):
    """Document metadata plus its full text."""

    raw_text: str


class DocumentListResponse(BaseModel):
    """Paginated document list, as produced by ``paginated_response``."""

    data: List[DocumentRead]
    total_count: int
    has_more: bool
    page: int
    items_per_page: int
