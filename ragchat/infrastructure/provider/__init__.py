"""Shared HTTP plumbing for OpenAI-compatible provider APIs."""

from .client import ProviderClient

__all__ = ["ProviderClient"]
