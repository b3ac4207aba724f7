from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin(MappedAsDataclass):
    """Mixin for adding created_at and updated_at timestamp columns.

    Both timestamps are timezone-aware UTC values set when the row object is
    created. ``updated_at`` is bumped by the services that care about recency
    (chat sessions after each turn, documents on status changes); there is no
    database trigger. Bulk inserts bypass the dataclass constructor and must
    pass both values themselves.

    Attributes:
        created_at: Timestamp when the record was created.
        updated_at: Timestamp when the record was last updated.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=False,
        init=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default_factory=utcnow,
        nullable=True,
        init=False,
    )
