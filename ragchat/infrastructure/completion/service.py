"""Completion gateway for the OpenAI-compatible ``/chat/completions`` endpoint."""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ...modules.common.exceptions import MalformedResponseError
from ..config.settings import get_settings
from ..logging import get_logger
from ..provider import ProviderClient

logger = get_logger(__name__)

CONNECTION_TEST_PROMPT = "antworte nur mit 'ok'"


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CompletionMessage(BaseModel):
    content: Optional[str] = None


class CompletionChoice(BaseModel):
    message: CompletionMessage


class CompletionResponse(BaseModel):
    choices: List[CompletionChoice]
    usage: Optional[TokenUsage] = None


@dataclass
class CompletionResult:
    """Trimmed answer text and token usage (None when the provider omits it)."""

    answer: str
    usage: Optional[TokenUsage]


class CompletionGateway(ProviderClient):
    """Requests single, non-streaming chat completions."""

    def __init__(
        self,
        base_url: str,
        default_temperature: float = 0.2,
        timeout: float = 60.0,
        connection_test_model: str = "gpt-5-nano",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url=base_url, timeout=timeout, transport=transport)
        self.default_temperature = default_temperature
        self.connection_test_model = connection_test_model

    async def complete(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        user_message: str,
        temperature: Optional[float] = None,
    ) -> CompletionResult:
        """Generate one answer for a system prompt and a user message.

        Args:
            api_key: Provider credential
            model: Chat model id
            system_prompt: Instruction text including any retrieved context; omitted from the request when empty
            user_message: The user's question
            temperature: Sampling temperature, None for the configured default

        Returns:
            The trimmed answer (possibly empty) and usage

        Raises:
            AuthenticationError: If the key is blank
            ProviderError: If the provider rejects the call or is unreachable
            MalformedResponseError: If the response has no usable choice
        """
        key = self.require_api_key(api_key)

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_message})

        payload = {
            "model": model,
            "messages": messages,
            "temperature": self.default_temperature if temperature is None else temperature,
        }
        body = await self.post_json(key, "/chat/completions", payload)

        try:
            parsed = CompletionResponse.model_validate(body)
        except ValidationError as e:
            raise MalformedResponseError("Chat completion response malformed") from e

        if not parsed.choices:
            raise MalformedResponseError("Chat completion response contained no choices")

        answer = (parsed.choices[0].message.content or "").strip()
        logger.debug(
            f"Completion received from {model}",
            extra={"model": model, "answer_length": len(answer), "has_usage": parsed.usage is not None},
        )
        return CompletionResult(answer=answer, usage=parsed.usage)

    async def check_connection(self, api_key: str) -> CompletionResult:
        """Verify that a key works by asking the provider to reply with "ok".

        Raises:
            AuthenticationError: If the key is blank
            ProviderError: If the provider rejects the key
            MalformedResponseError: If the reply is anything other than "ok"
        """
        result = await self.complete(
            api_key,
            model=self.connection_test_model,
            system_prompt="",
            user_message=CONNECTION_TEST_PROMPT,
            temperature=1,
        )
        if result.answer.lower() != "ok":
            raise MalformedResponseError(f"Unexpected connection test reply: {result.answer!r}")
        return result


@lru_cache()
def get_completion_gateway() -> CompletionGateway:
    """Get the process-wide completion gateway built from settings."""
    settings = get_settings()
    return CompletionGateway(
        base_url=settings.OPENAI_BASE_URL,
        default_temperature=settings.CHAT_TEMPERATURE,
        timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        connection_test_model=settings.CONNECTION_TEST_MODEL,
    )
