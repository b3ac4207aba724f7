"""SQLAlchemy models for chunk entities."""

from typing import List

from sqlalchemy import ARRAY, JSON, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base

EmbeddingVector = ARRAY(Float).with_variant(JSON(), "sqlite")


class Chunk(Base, TimestampMixin):
    """A contiguous slice of a document with its embedding.

    ``chunk_index`` is 0-based and contiguous within a document. Chunks are
    written in one batch once the document's embeddings are known and are
    never updated afterwards.
    """

    __tablename__ = "document_chunks"
    __table_args__ = (UniqueConstraint("document_id", "chunk_index", name="uq_document_chunks_document_index"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    document_id: Mapped[int] = mapped_column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), index=True)
    owner_id: Mapped[str] = mapped_column(String(255), index=True)
    chunk_index: Mapped[int] = mapped_column(Integer)
    content: Mapped[str] = mapped_column(Text)
    embedding: Mapped[List[float]] = mapped_column(EmbeddingVector)
