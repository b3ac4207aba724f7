"""Base HTTP client for OpenAI-compatible provider endpoints."""

from typing import Any, Dict, Optional

import httpx

from ...modules.common.exceptions import AuthenticationError, MalformedResponseError, ProviderError
from ..logging import get_logger

logger = get_logger(__name__)


class ProviderClient:
    """Sends authenticated JSON requests to an OpenAI-compatible API.

    One ``httpx.AsyncClient`` is opened per call and closed afterwards; calls
    are never retried. ``transport`` lets tests substitute an
    ``httpx.MockTransport``.
    """

    provider_name = "openai"

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _get_auth_header(self, api_key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    @staticmethod
    def require_api_key(api_key: Optional[str]) -> str:
        """Return the stripped key, or raise before any network call if it is blank."""
        key = (api_key or "").strip()
        if not key:
            raise AuthenticationError("Missing OpenAI API key. Set it via /api/v1/profile.")
        return key

    async def post_json(self, api_key: str, endpoint: str, payload: Dict[str, Any]) -> Any:
        """POST ``payload`` to ``endpoint`` and return the decoded JSON body.

        Args:
            api_key: Provider credential (already validated)
            endpoint: Path below the base URL, e.g. "/embeddings"
            payload: JSON request body

        Returns:
            The decoded response body

        Raises:
            ProviderError: On a non-2xx status or a transport failure
            MalformedResponseError: If the body is not JSON
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=self._get_auth_header(api_key))
        except httpx.HTTPError as e:
            logger.error(
                f"Request to {url} failed: {e}",
                extra={"provider": self.provider_name, "endpoint": endpoint, "error_type": type(e).__name__},
            )
            raise ProviderError(f"{self.provider_name} request to {endpoint} failed: {e}", status_code=None, body=str(e)) from e

        if not response.is_success:
            logger.warning(
                f"Request to {url} returned {response.status_code}",
                extra={"provider": self.provider_name, "endpoint": endpoint, "status_code": response.status_code},
            )
            raise ProviderError(
                f"{self.provider_name} request to {endpoint} failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"{self.provider_name} response from {endpoint} is not valid JSON") from e
