"""Configuration module for the application."""

from .chat_models import ChatModel, ChatModelCatalog, get_chat_model_catalog
from .settings import Settings, get_settings, settings

__all__ = [
    "ChatModel",
    "ChatModelCatalog",
    "Settings",
    "get_chat_model_catalog",
    "get_settings",
    "settings",
]
