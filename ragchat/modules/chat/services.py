"""Chat session and message service."""

from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from ...infrastructure.logging import get_logger
from ..common.constants import DEFAULT_CHAT_TITLE, MAX_CHAT_TITLE_LENGTH
from ..common.exceptions import InvalidInputError, NotFoundError, PersistenceError
from .crud import chat_session_crud, message_crud
from .models import ChatSession, Message, MessageRole
from .schemas import ChatSessionCreateInternal, ChatSessionRead, MessageCreateInternal, MessageRead

logger = get_logger(__name__)


class ChatSessionService:
    """Service for an owner's chat sessions and their message history.

    An unknown session and another owner's session are indistinguishable to
    callers: both raise ``NotFoundError``.
    """

    async def create_session(self, owner_id: str, db: AsyncSession) -> ChatSessionRead:
        """Create an empty session titled "New chat"."""
        try:
            created: ChatSession = await chat_session_crud.create(
                db=db, object=ChatSessionCreateInternal(owner_id=owner_id, title=DEFAULT_CHAT_TITLE)
            )
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to create chat session: {e}") from e

        return ChatSessionRead.model_validate(created)

    async def list_sessions(self, owner_id: str, db: AsyncSession) -> List[ChatSessionRead]:
        """List the owner's sessions, most recently active first."""
        stmt = (
            select(ChatSession)
            .where(ChatSession.owner_id == owner_id)
            .order_by(ChatSession.updated_at.desc(), ChatSession.id.desc())
        )
        result = await db.execute(stmt)
        return [ChatSessionRead.model_validate(session) for session in result.scalars().all()]

    async def get_session(self, owner_id: str, chat_id: int, db: AsyncSession) -> ChatSessionRead:
        """Get one of the owner's sessions.

        Raises:
            NotFoundError: If the session does not exist for this owner
        """
        session = await chat_session_crud.get(db=db, id=chat_id, owner_id=owner_id, schema_to_select=ChatSessionRead)
        if not session:
            raise NotFoundError("Chat not found")
        return ChatSessionRead(**session)

    async def ensure_owned(self, owner_id: str, chat_id: int, db: AsyncSession) -> None:
        if not await chat_session_crud.exists(db=db, id=chat_id, owner_id=owner_id):
            raise NotFoundError("Chat not found")

    async def rename_session(self, owner_id: str, chat_id: int, title: str, db: AsyncSession) -> ChatSessionRead:
        """Rename a session.

        The title is trimmed and cut to 120 characters.

        Raises:
            InvalidInputError: If the title is blank
            NotFoundError: If the session does not exist for this owner
        """
        cleaned = (title or "").strip()[:MAX_CHAT_TITLE_LENGTH]
        if not cleaned:
            raise InvalidInputError("Title must not be empty")

        await self.ensure_owned(owner_id, chat_id, db)
        await self._update_session(chat_id, {"title": cleaned}, db)
        return await self.get_session(owner_id, chat_id, db)

    async def touch_session(self, chat_id: int, db: AsyncSession) -> None:
        """Mark a session as active now so it sorts first."""
        await self._update_session(chat_id, {}, db)

    async def _update_session(self, chat_id: int, values: Dict[str, Any], db: AsyncSession) -> None:
        stmt = update(ChatSession).where(ChatSession.id == chat_id).values(**values, updated_at=utcnow())
        try:
            await db.execute(stmt)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to update chat session {chat_id}: {e}") from e

    async def delete_session(self, owner_id: str, chat_id: int, db: AsyncSession) -> None:
        """Delete a session and, by cascade, its messages.

        Raises:
            NotFoundError: If the session does not exist for this owner
        """
        await self.ensure_owned(owner_id, chat_id, db)

        try:
            await db.execute(delete(ChatSession).where(ChatSession.id == chat_id, ChatSession.owner_id == owner_id))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to delete chat session {chat_id}: {e}") from e

        logger.info(f"Deleted chat session {chat_id}", extra={"chat_id": chat_id})

    async def add_message(
        self,
        owner_id: str,
        chat_id: int,
        role: MessageRole,
        content: str,
        metadata: Optional[Dict[str, Any]],
        db: AsyncSession,
    ) -> MessageRead:
        """Append a message to a session.

        Raises:
            PersistenceError: If the insert fails
        """
        message_internal = MessageCreateInternal(
            chat_id=chat_id,
            owner_id=owner_id,
            role=role.value,
            content=content,
            extra_metadata=metadata,
        )
        try:
            created: Message = await message_crud.create(db=db, object=message_internal)
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to store {role.value} message: {e}") from e

        return MessageRead.model_validate(created)

    async def list_messages(self, owner_id: str, chat_id: int, db: AsyncSession) -> List[MessageRead]:
        """List a session's messages in insertion order.

        Raises:
            NotFoundError: If the session does not exist for this owner
        """
        await self.ensure_owned(owner_id, chat_id, db)

        stmt = select(Message).where(Message.chat_id == chat_id).order_by(Message.id)
        result = await db.execute(stmt)
        return [MessageRead.model_validate(message) for message in result.scalars().all()]
