"""Abstract base classes for vector indexing algorithms."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from ..config.settings import SimilarityMetric


@dataclass
class ChunkVector:
    """A stored chunk with its vector embedding."""

    chunk_id: int
    document_id: int
    chunk_index: int
    content: str
    embedding: List[float]


@dataclass
class SearchResult:
    """A chunk matched by a search, with its similarity to the query."""

    chunk_id: int
    document_id: int
    chunk_index: int
    content: str
    similarity_score: float


class VectorIndex(ABC):
    """Abstract base class for vector indexing algorithms.

    Implementations return results most similar first. Results with equal
    similarity keep the order in which their vectors were added.
    """

    def __init__(self, dimension: int, metric: SimilarityMetric = SimilarityMetric.COSINE):
        """Initialize the vector index.

        Args:
            dimension: The dimension of the vectors to be indexed
            metric: Similarity function used to rank vectors
        """
        self.dimension = dimension
        self.metric = metric
        self.vectors: List[ChunkVector] = []

    @abstractmethod
    async def add_vectors(self, vectors: List[ChunkVector]) -> None:
        """Add vectors to the index.

        Args:
            vectors: Vectors in storage order
        """
        pass

    @abstractmethod
    async def search(self, query_embedding: List[float], k: int) -> List[SearchResult]:
        """Search for the k most similar vectors.

        Args:
            query_embedding: The query vector
            k: Number of nearest neighbors to return

        Returns:
            List of search results sorted by similarity (descending)
        """
        pass

    def _validate_embedding(self, embedding: List[float]) -> None:
        """Validate that an embedding has the correct dimension.

        Raises:
            ValueError: If the embedding dimension is incorrect
        """
        if len(embedding) != self.dimension:
            raise ValueError(f"Embedding dimension {len(embedding)} does not match index dimension {self.dimension}")
