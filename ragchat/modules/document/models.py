"""SQLAlchemy models for document entities."""

from enum import Enum
from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base
from ..common.constants import MAX_DOCUMENT_NAME_LENGTH


class DocumentSource(str, Enum):
    UPLOAD = "upload"
    PASTE = "paste"


class IngestionStatus(str, Enum):
    """Lifecycle of a document's chunking and embedding."""

    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"


class Document(Base, TimestampMixin):
    """A user-supplied text and the state of its ingestion.

    A document starts as ``processing`` and ends either ``processed`` (all of
    its chunks and embeddings stored) or ``failed`` (no chunks stored,
    ``ingestion_error`` says why). Chunks are removed with the document via
    ``ON DELETE CASCADE``.
    """

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    document_name: Mapped[str] = mapped_column(String(MAX_DOCUMENT_NAME_LENGTH))
    raw_text: Mapped[str] = mapped_column(Text)
    source: Mapped[str] = mapped_column(String(20), default=DocumentSource.PASTE.value)
    document_type: Mapped[str] = mapped_column(String(20), default="text")
    ingestion_status: Mapped[str] = mapped_column(String(20), default=IngestionStatus.PROCESSING.value, index=True)
    ingestion_error: Mapped[Optional[str]] = mapped_column(Text, default=None)
