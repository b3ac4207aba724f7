"""Imports every model so their tables are registered on ``Base.metadata``."""

from .chat.models import ChatSession, Message
from .chunk.models import Chunk
from .document.models import Document
from .profile.models import Profile

__all__ = ["ChatSession", "Chunk", "Document", "Message", "Profile"]
