"""SQLAlchemy model for per-owner settings."""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Profile(Base, TimestampMixin):
    """Provider credential and base system prompt of one owner."""

    __tablename__ = "profiles"

    owner_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    openai_api_key: Mapped[Optional[str]] = mapped_column(Text, default=None)
    system_prompt: Mapped[Optional[str]] = mapped_column(Text, default=None)
