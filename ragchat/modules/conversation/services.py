"""Conversation orchestration: one retrieval-augmented chat turn."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.completion import CompletionGateway, get_completion_gateway
from ...infrastructure.config.chat_models import ChatModelCatalog, get_chat_model_catalog
from ...infrastructure.embedding import EmbeddingGateway, get_embedding_gateway
from ...infrastructure.logging import get_logger
from ..chat.models import MessageRole
from ..chat.services import ChatSessionService
from ..common.constants import NO_CONTEXT_ANSWER
from ..document.services import DocumentService
from ..profile.services import ProfileService
from ..retrieval.prompt import assemble_prompt
from ..retrieval.services import RetrievalService, clamp_top_k
from .schemas import ChatTurnRequest, ChatTurnResult

logger = get_logger(__name__)


class ConversationService:
    """Answers a user message from the owner's documents.

    The steps run strictly in order and any failure ends the turn:

    1. check the session belongs to the owner
    2. pick the model and resolve the provider key
    3. store the user message
    4. embed the message
    5. retrieve the most similar chunks
    6. look up the documents' display names
    7. build the system prompt and citations
    8. request the completion
    9. store the answer and mark the session active

    Nothing is written before step 3, and a failure from step 4 onwards
    leaves the stored user message in place.
    """

    def __init__(
        self,
        embedding_gateway: Optional[EmbeddingGateway] = None,
        completion_gateway: Optional[CompletionGateway] = None,
        retrieval_service: Optional[RetrievalService] = None,
        chat_service: Optional[ChatSessionService] = None,
        document_service: Optional[DocumentService] = None,
        profile_service: Optional[ProfileService] = None,
        catalog: Optional[ChatModelCatalog] = None,
    ):
        self.embedding_gateway = embedding_gateway or get_embedding_gateway()
        self.completion_gateway = completion_gateway or get_completion_gateway()
        self.retrieval_service = retrieval_service or RetrievalService()
        self.chat_service = chat_service or ChatSessionService()
        self.document_service = document_service or DocumentService()
        self.profile_service = profile_service or ProfileService()
        self.catalog = catalog or get_chat_model_catalog()

    async def send_message(
        self,
        owner_id: str,
        chat_id: int,
        request: ChatTurnRequest,
        db: AsyncSession,
    ) -> ChatTurnResult:
        """Run one chat turn.

        Args:
            owner_id: Owner of the session
            chat_id: Session to answer in
            request: Message, model selection and retrieval size
            db: Database session

        Returns:
            The stored answer, the model used, citations and usage

        Raises:
            NotFoundError: If the session does not exist for this owner
            AuthenticationError: If no provider key is available
            ProviderError: If a provider call fails
            MalformedResponseError: If a provider answer cannot be parsed
            RetrievalError: If the similarity search fails
            PersistenceError: If a message cannot be stored
        """
        await self.chat_service.ensure_owned(owner_id, chat_id, db)

        model = self.catalog.pick(request.model)
        top_k = clamp_top_k(request.top_k)
        api_key = await self.profile_service.resolve_api_key(owner_id, db)

        user_message = await self.chat_service.add_message(
            owner_id, chat_id, MessageRole.USER, request.message, {"model_requested": model}, db
        )

        [query_embedding] = await self.embedding_gateway.embed(api_key, None, [request.message])
        chunks = await self.retrieval_service.retrieve(owner_id, query_embedding, top_k, db)
        document_names = await self.document_service.get_document_names(
            owner_id, {chunk.document_id for chunk in chunks}, db
        )

        base_prompt = await self.profile_service.resolve_system_prompt(owner_id, db)
        prompt = assemble_prompt(base_prompt, chunks, document_names)

        completion = await self.completion_gateway.complete(api_key, model, prompt.system_prompt, request.message)
        answer = completion.answer or NO_CONTEXT_ANSWER

        assistant_metadata = {
            "model_used": model,
            "top_k": top_k,
            "usage": completion.usage.model_dump() if completion.usage else None,
            "citations": [citation.model_dump() for citation in prompt.citations],
            "reply_to": user_message.id,
        }
        assistant_message = await self.chat_service.add_message(
            owner_id, chat_id, MessageRole.ASSISTANT, answer, assistant_metadata, db
        )
        await self.chat_service.touch_session(chat_id, db)

        logger.info(
            f"Chat turn completed in session {chat_id}",
            extra={"chat_id": chat_id, "model": model, "top_k": top_k, "citation_count": len(prompt.citations)},
        )

        return ChatTurnResult(
            chat_id=chat_id,
            model=model,
            answer=answer,
            citations=prompt.citations,
            usage=completion.usage,
            user_message_id=user_message.id,
            assistant_message_id=assistant_message.id,
        )
