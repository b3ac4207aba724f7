"""Similarity search over an owner's stored chunk embeddings."""

import time
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...modules.chunk.models import Chunk
from ...modules.document.models import Document, IngestionStatus
from ..config.settings import SimilarityMetric, get_settings
from ..logging import get_logger
from .base import ChunkVector, SearchResult, VectorIndex
from .linear_search import LinearSearchIndex

logger = get_logger(__name__)


class VectorSearchManager:
    """Builds a per-query index from the store and searches it.

    Only chunks of the owner's ``processed`` documents are candidates. No
    index state is kept between calls, so newly ingested or deleted documents
    are reflected immediately.
    """

    def __init__(self, metric: Optional[SimilarityMetric] = None):
        self.metric = metric or get_settings().SIMILARITY_METRIC

    async def search(
        self,
        owner_id: str,
        query_embedding: List[float],
        limit: int,
        db: AsyncSession,
    ) -> List[SearchResult]:
        """Return the owner's chunks most similar to the query.

        Args:
            owner_id: Owner whose chunks are searched
            query_embedding: Query vector
            limit: Maximum number of results
            db: Database session

        Returns:
            Results most similar first; ties keep storage order
        """
        started = time.perf_counter()
        vectors = await self._load_owner_vectors(owner_id, db)
        if not vectors:
            return []

        index = self._create_index(len(query_embedding))
        await index.add_vectors(vectors)
        results = await index.search(query_embedding=query_embedding, k=limit)

        logger.debug(
            f"Searched {len(vectors)} chunks in {(time.perf_counter() - started) * 1000:.1f} ms",
            extra={"candidates": len(vectors), "returned": len(results), "metric": self.metric.value},
        )
        return results

    def _create_index(self, dimension: int) -> VectorIndex:
        return LinearSearchIndex(dimension=dimension, metric=self.metric)

    async def _load_owner_vectors(self, owner_id: str, db: AsyncSession) -> List[ChunkVector]:
        stmt = (
            select(Chunk.id, Chunk.document_id, Chunk.chunk_index, Chunk.content, Chunk.embedding)
            .join(Document, Chunk.document_id == Document.id)
            .where(
                Document.owner_id == owner_id,
                Document.ingestion_status == IngestionStatus.PROCESSED.value,
            )
            .order_by(Chunk.id)
        )

        result = await db.execute(stmt)

        return [
            ChunkVector(
                chunk_id=row.id,
                document_id=row.document_id,
                chunk_index=row.chunk_index,
                content=row.content,
                embedding=list(row.embedding),
            )
            for row in result.fetchall()
        ]
