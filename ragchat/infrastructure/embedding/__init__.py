"""Embedding gateway: text-to-vector conversion through the provider API."""

from .service import EmbeddingGateway, get_embedding_gateway

__all__ = ["EmbeddingGateway", "get_embedding_gateway"]
