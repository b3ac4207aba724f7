"""Completion gateway: chat completions through the provider API."""

from .service import CompletionGateway, CompletionResult, TokenUsage, get_completion_gateway

__all__ = ["CompletionGateway", "CompletionResult", "TokenUsage", "get_completion_gateway"]
