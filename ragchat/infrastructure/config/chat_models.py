"""Catalog of chat-completion models the API lets callers pick from."""

import json
import math
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .settings import get_settings


@dataclass(frozen=True)
class ModelPricing:
    """Provider list prices in USD per one million tokens."""

    input_per_1m: float
    output_per_1m: float
    cached_input_per_1m: Optional[float] = None


@dataclass(frozen=True)
class ChatModel:
    """A selectable chat model."""

    id: str
    label: str
    pricing: ModelPricing


DEFAULT_CHAT_MODELS: Tuple[ChatModel, ...] = (
    ChatModel(id="gpt-5-nano", label="GPT-5 nano", pricing=ModelPricing(0.05, 0.40, 0.005)),
    ChatModel(id="gpt-5-mini", label="GPT-5 mini", pricing=ModelPricing(0.25, 2.00, 0.025)),
    ChatModel(id="gpt-5.2", label="GPT-5.2", pricing=ModelPricing(1.25, 10.00, 0.125)),
    ChatModel(id="gpt-4.1-mini", label="GPT-4.1 mini", pricing=ModelPricing(0.40, 1.60, 0.10)),
    ChatModel(id="gpt-4o-mini", label="GPT-4o mini", pricing=ModelPricing(0.15, 0.60, 0.075)),
)


@dataclass(frozen=True)
class ChatModelCatalog:
    """Immutable allow-list of chat models with a precomputed default.

    The default model is the cheapest entry by combined input and output
    price. Entries whose prices are not finite numbers never win; when no
    entry qualifies the configured fallback id is used.
    """

    models: Tuple[ChatModel, ...]
    fallback_model: str
    default_model: str = field(init=False)
    allowed: FrozenSet[str] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed", frozenset(model.id for model in self.models))
        object.__setattr__(self, "default_model", self._cheapest_model_id())

    def _cheapest_model_id(self) -> str:
        cheapest: Optional[ChatModel] = None
        cheapest_cost = math.inf

        for model in self.models:
            cost = model.pricing.input_per_1m + model.pricing.output_per_1m
            if not math.isfinite(cost):
                continue
            if cost < cheapest_cost:
                cheapest_cost = cost
                cheapest = model

        return cheapest.id if cheapest else self.fallback_model

    def pick(self, selection: Optional[str]) -> str:
        """Resolve a caller's model selection against the allow-list.

        Args:
            selection: Requested model id, possibly blank or unknown

        Returns:
            The requested id when allowed, otherwise the default model
        """
        requested = (selection or "").strip()
        if requested and requested in self.allowed:
            return requested
        return self.default_model


def parse_chat_models(raw: str) -> Tuple[ChatModel, ...]:
    """Parse a JSON model list into catalog entries.

    Accepts either a list of models or an object with a ``models`` key, each
    model shaped like ``{"id", "label", "pricing": {"input_per_1m",
    "cached_input_per_1m", "output_per_1m"}}``. Entries without an id are
    skipped.

    Args:
        raw: JSON text

    Returns:
        Parsed models in their original order

    Raises:
        ValueError: If the text is not valid JSON or has the wrong shape
    """
    payload: Any = json.loads(raw)
    if isinstance(payload, dict):
        payload = payload.get("models", [])
    if not isinstance(payload, list):
        raise ValueError("CHAT_MODELS must be a JSON list of models")

    models: List[ChatModel] = []
    for entry in payload:
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        pricing: Dict[str, Any] = entry.get("pricing") or {}
        cached = pricing.get("cached_input_per_1m")
        models.append(
            ChatModel(
                id=str(entry["id"]),
                label=str(entry.get("label") or entry["id"]),
                pricing=ModelPricing(
                    input_per_1m=float(pricing.get("input_per_1m", math.nan)),
                    output_per_1m=float(pricing.get("output_per_1m", math.nan)),
                    cached_input_per_1m=float(cached) if cached is not None else None,
                ),
            )
        )
    return tuple(models)


def build_chat_model_catalog(raw_models: str = "", fallback_model: str = "gpt-5.2") -> ChatModelCatalog:
    models = parse_chat_models(raw_models) if raw_models.strip() else DEFAULT_CHAT_MODELS
    return ChatModelCatalog(models=models, fallback_model=fallback_model)


@lru_cache()
def get_chat_model_catalog() -> ChatModelCatalog:
    """Get the process-wide chat model catalog, built once from settings."""
    settings = get_settings()
    return build_chat_model_catalog(settings.CHAT_MODELS, settings.DEFAULT_CHAT_MODEL)
