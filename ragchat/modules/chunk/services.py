"""Chunk persistence service."""

from typing import Any, List, Sequence

from fastcrud.paginated.response import paginated_response
from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from ...infrastructure.logging import get_logger
from ..common.exceptions import InvalidInputError, PersistenceError
from .chunking import TextChunk
from .crud import chunk_crud
from .models import Chunk
from .schemas import ChunkRead

logger = get_logger(__name__)


class ChunkService:
    """Service for storing and reading document chunks.

    Chunks are written once per document in a single batch after all of the
    document's embeddings are known, and removed either by the cascade on
    document deletion or by ``delete_chunks_by_document`` during ingestion
    compensation.
    """

    async def insert_chunks(
        self,
        document_id: int,
        owner_id: str,
        chunks: Sequence[TextChunk],
        embeddings: Sequence[List[float]],
        db: AsyncSession,
    ) -> int:
        """Insert all chunks of a document in one statement and one transaction.

        Args:
            document_id: Owning document
            owner_id: Owner of the document
            chunks: Chunks in document order
            embeddings: One vector per chunk, same order
            db: Database session

        Returns:
            Number of rows inserted

        Raises:
            InvalidInputError: If chunks and embeddings differ in length
            PersistenceError: If the insert fails; the transaction is rolled back
        """
        if len(chunks) != len(embeddings):
            raise InvalidInputError(f"Got {len(chunks)} chunks but {len(embeddings)} embeddings")
        if not chunks:
            return 0

        now = utcnow()
        rows = [
            {
                "document_id": document_id,
                "owner_id": owner_id,
                "chunk_index": chunk.index,
                "content": chunk.content,
                "embedding": list(embedding),
                "created_at": now,
                "updated_at": now,
            }
            for chunk, embedding in zip(chunks, embeddings)
        ]

        try:
            await db.execute(insert(Chunk), rows)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to insert chunks for document {document_id}: {e}") from e

        return len(rows)

    async def delete_chunks_by_document(self, document_id: int, db: AsyncSession) -> int:
        """Delete every chunk of a document, returning the number of rows removed.

        Raises:
            PersistenceError: If the delete fails
        """
        try:
            result = await db.execute(delete(Chunk).where(Chunk.document_id == document_id))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to delete chunks of document {document_id}: {e}") from e

        return result.rowcount or 0

    async def count_chunks(self, document_id: int, db: AsyncSession) -> int:
        """Count the stored chunks of a document."""
        result = await db.execute(select(func.count(Chunk.id)).where(Chunk.document_id == document_id))
        return int(result.scalar_one())

    async def get_chunks_by_document(
        self,
        document_id: int,
        db: AsyncSession,
        page: int = 1,
        items_per_page: int = 50,
    ) -> dict[str, Any]:
        """Get a document's chunks in ``chunk_index`` order with pagination.

        Args:
            document_id: Document ID to get chunks from
            db: Database session
            page: Page number (1-indexed)
            items_per_page: Number of chunks per page

        Returns:
            Paginated response with chunks (without embeddings)
        """
        offset = (page - 1) * items_per_page

        result = await chunk_crud.get_multi(
            db=db,
            document_id=document_id,
            limit=items_per_page,
            offset=offset,
            sort_columns="chunk_index",
            sort_orders="asc",
            schema_to_select=ChunkRead,
        )

        crud_data = {"data": result.get("data", []), "total_count": result.get("total_count", 0)}

        return paginated_response(crud_data, page, items_per_page)
