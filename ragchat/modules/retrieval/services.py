"""Retrieval of the stored chunks most relevant to a query embedding."""

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.config.settings import get_settings
from ...infrastructure.indexing import VectorSearchManager
from ...infrastructure.logging import get_logger
from ..common.exceptions import RetrievalError
from .schemas import RetrievedChunk

logger = get_logger(__name__)


def clamp_top_k(value: Optional[int]) -> int:
    """Clamp a requested result count into the allowed range.

    ``None`` means the configured default (6); values are clamped into
    [MIN_TOP_K, MAX_TOP_K] (1..10).
    """
    settings = get_settings()
    requested = settings.DEFAULT_TOP_K if value is None else int(value)
    return max(settings.MIN_TOP_K, min(settings.MAX_TOP_K, requested))


class RetrievalService:
    """Fetches the top-ranked chunks for a query embedding.

    The search capability already ranks results, most similar first; this
    service keeps that order and only truncates it.
    """

    def __init__(self, search_manager: Optional[VectorSearchManager] = None):
        self.search_manager = search_manager or VectorSearchManager()

    async def retrieve(
        self,
        owner_id: str,
        query_embedding: List[float],
        top_k: int,
        db: AsyncSession,
    ) -> List[RetrievedChunk]:
        """Return at most ``top_k`` of the owner's chunks, most similar first.

        Args:
            owner_id: Owner whose chunks are searched
            query_embedding: Query vector
            top_k: Maximum number of chunks (already clamped by the caller)
            db: Database session

        Returns:
            Retrieved chunks in search order; empty when nothing matches

        Raises:
            RetrievalError: If the similarity search fails
        """
        try:
            results = await self.search_manager.search(owner_id, query_embedding, top_k, db)
        except (SQLAlchemyError, ValueError, TypeError) as e:
            logger.error(f"Similarity search failed: {e}", extra={"top_k": top_k})
            raise RetrievalError(f"Similarity search failed: {e}") from e

        return [
            RetrievedChunk(
                chunk_id=result.chunk_id,
                document_id=result.document_id,
                chunk_index=result.chunk_index,
                content=result.content,
                similarity=result.similarity_score,
            )
            for result in results[:top_k]
        ]
