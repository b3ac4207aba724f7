"""Embedding gateway for the OpenAI-compatible ``/embeddings`` endpoint."""

from functools import lru_cache
from typing import List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ...modules.common.exceptions import InvalidInputError, MalformedResponseError
from ..config.settings import get_settings
from ..logging import get_logger
from ..provider import ProviderClient

logger = get_logger(__name__)


class EmbeddingItem(BaseModel):
    embedding: List[float]
    index: int


class EmbeddingResponse(BaseModel):
    data: List[EmbeddingItem]


class EmbeddingGateway(ProviderClient):
    """Turns texts into embedding vectors with one batched provider call.

    The provider may return items out of order; they are sorted by their
    ``index`` so the i-th vector always belongs to the i-th input text.
    """

    def __init__(
        self,
        base_url: str,
        default_model: str = "text-embedding-3-small",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        self.default_model = default_model

    async def embed(self, api_key: str, model: Optional[str], texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts.

        Args:
            api_key: Provider credential
            model: Embedding model id, None for the configured default
            texts: Texts to embed, at least one

        Returns:
            One vector per input text, in input order

        Raises:
            AuthenticationError: If the key is blank
            InvalidInputError: If texts is empty
            ProviderError: If the provider rejects the call or is unreachable
            MalformedResponseError: If the response shape or count is wrong
        """
        key = self.require_api_key(api_key)
        if not texts:
            raise InvalidInputError("At least one text is required for embedding")

        payload = {"model": model or self.default_model, "input": texts}
        body = await self.post_json(key, "/embeddings", payload)

        try:
            parsed = EmbeddingResponse.model_validate(body)
        except ValidationError as e:
            raise MalformedResponseError("Embedding response malformed") from e

        if len(parsed.data) != len(texts):
            raise MalformedResponseError(
                f"Embedding response malformed: expected {len(texts)} vectors, got {len(parsed.data)}"
            )

        ordered = sorted(parsed.data, key=lambda item: item.index)
        logger.debug(f"Embedded {len(texts)} texts", extra={"model": payload["model"], "count": len(texts)})
        return [item.embedding for item in ordered]


@lru_cache()
def get_embedding_gateway() -> EmbeddingGateway:
    """Get the process-wide embedding gateway built from settings."""
    settings = get_settings()
    return EmbeddingGateway(
        base_url=settings.OPENAI_BASE_URL,
        default_model=settings.EMBEDDING_MODEL,
        timeout=settings.PROVIDER_TIMEOUT_SECONDS,
    )
