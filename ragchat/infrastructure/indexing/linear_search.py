"""Linear search vector index implementation."""

import math
from typing import List, Tuple

from ..config.settings import SimilarityMetric
from .base import ChunkVector, SearchResult, VectorIndex


class LinearSearchIndex(VectorIndex):
    """Exact brute-force index.

    Compares the query against every stored vector:

    - Time Complexity (Search): O(n * d) where n = vectors, d = dimension
    - Accuracy: 100% (exact results)
    - Build Time: none

    ``list.sort`` is stable, so vectors with equal similarity come back in
    the order they were added.
    """

    async def add_vectors(self, vectors: List[ChunkVector]) -> None:
        for vector in vectors:
            self._validate_embedding(vector.embedding)

        self.vectors.extend(vectors)

    async def search(self, query_embedding: List[float], k: int) -> List[SearchResult]:
        """Search for the k most similar vectors using linear search.

        Args:
            query_embedding: The query vector
            k: Number of nearest neighbors to return

        Returns:
            List of search results sorted by similarity (descending)
        """
        self._validate_embedding(query_embedding)

        if not self.vectors or k < 1:
            return []

        scored: List[Tuple[float, ChunkVector]] = [
            (self._similarity(query_embedding, vector.embedding), vector) for vector in self.vectors
        ]
        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            SearchResult(
                chunk_id=vector.chunk_id,
                document_id=vector.document_id,
                chunk_index=vector.chunk_index,
                content=vector.content,
                similarity_score=score,
            )
            for score, vector in scored[:k]
        ]

    def _similarity(self, vec1: List[float], vec2: List[float]) -> float:
        if self.metric == SimilarityMetric.INNER_PRODUCT:
            return self._inner_product(vec1, vec2)
        return self._cosine_similarity(vec1, vec2)

    @staticmethod
    def _inner_product(vec1: List[float], vec2: List[float]) -> float:
        return sum(a * b for a, b in zip(vec1, vec2))

    def _cosine_similarity(self, vec1: List[float], vec2: List[float]) -> float:
        """Calculate cosine similarity between two vectors.

        Formula: cos(θ) = (A · B) / (||A|| ||B||)

        Returns:
            Similarity in [-1, 1]; 0.0 when either vector has zero length
        """
        magnitude1 = math.sqrt(sum(a * a for a in vec1))
        magnitude2 = math.sqrt(sum(b * b for b in vec2))

        if magnitude1 == 0.0 or magnitude2 == 0.0:
            return 0.0

        return self._inner_product(vec1, vec2) / (magnitude1 * magnitude2)
