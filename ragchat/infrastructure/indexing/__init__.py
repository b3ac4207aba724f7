"""Vector indexing and similarity search over stored chunks."""

from .base import ChunkVector, SearchResult, VectorIndex
from .linear_search import LinearSearchIndex
from .manager import VectorSearchManager

__all__ = [
    "ChunkVector",
    "LinearSearchIndex",
    "SearchResult",
    "VectorIndex",
    "VectorSearchManager",
]
