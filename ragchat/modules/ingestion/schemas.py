"""Pydantic schemas for document ingestion."""

from enum import Enum

from pydantic import BaseModel, Field


class IngestionStage(str, Enum):
    """Steps of an ingestion run, in execution order."""

    DOCUMENT_INSERT = "document_insert"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    CHUNK_INSERT = "chunk_insert"
    FINALIZE = "finalize"


class IngestionResult(BaseModel):
    """Outcome of a successful ingestion."""

    document_id: int = Field(description="ID of the created document")
    chunk_count: int = Field(description="Number of chunks stored for the document")


class IngestionErrorResponse(BaseModel):
    detail: str
    stage: IngestionStage
    document_id: int | None = None
