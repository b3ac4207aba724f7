"""FastAPI dependencies for use in API endpoints."""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.completion import CompletionGateway, get_completion_gateway
from ...infrastructure.config.chat_models import ChatModelCatalog, get_chat_model_catalog
from ...infrastructure.database import async_session
from ...infrastructure.embedding import EmbeddingGateway, get_embedding_gateway
from ...modules.chat.services import ChatSessionService
from ...modules.chunk.services import ChunkService
from ...modules.conversation.services import ConversationService
from ...modules.document.services import DocumentService
from ...modules.ingestion.services import IngestionService
from ...modules.profile.services import ProfileService

DbSession = Annotated[AsyncSession, Depends(async_session)]


async def get_owner_id(
    x_owner_id: Annotated[Optional[str], Header(description="Opaque id of the authenticated user")] = None,
) -> str:
    """Owner identity handed over by the authenticating front end."""
    owner_id = (x_owner_id or "").strip()
    if not owner_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return owner_id


OwnerId = Annotated[str, Depends(get_owner_id)]


def get_document_service() -> DocumentService:
    """Dependency for providing a DocumentService instance."""
    return DocumentService()


def get_chunk_service() -> ChunkService:
    """Dependency for providing a ChunkService instance."""
    return ChunkService()


def get_profile_service() -> ProfileService:
    """Dependency for providing a ProfileService instance."""
    return ProfileService()


def get_chat_session_service() -> ChatSessionService:
    """Dependency for providing a ChatSessionService instance."""
    return ChatSessionService()


def get_model_catalog() -> ChatModelCatalog:
    return get_chat_model_catalog()


def get_embedding_gateway_dependency() -> EmbeddingGateway:
    return get_embedding_gateway()


def get_completion_gateway_dependency() -> CompletionGateway:
    return get_completion_gateway()


def get_ingestion_service(
    embedding_gateway: EmbeddingGateway = Depends(get_embedding_gateway_dependency),
    profile_service: ProfileService = Depends(get_profile_service),
) -> IngestionService:
    """Dependency for providing an IngestionService instance."""
    return IngestionService(embedding_gateway=embedding_gateway, profile_service=profile_service)


def get_conversation_service(
    embedding_gateway: EmbeddingGateway = Depends(get_embedding_gateway_dependency),
    completion_gateway: CompletionGateway = Depends(get_completion_gateway_dependency),
    profile_service: ProfileService = Depends(get_profile_service),
    catalog: ChatModelCatalog = Depends(get_model_catalog),
) -> ConversationService:
    """Dependency for providing a ConversationService instance."""
    return ConversationService(
        embedding_gateway=embedding_gateway,
        completion_gateway=completion_gateway,
        profile_service=profile_service,
        catalog=catalog,
    )
