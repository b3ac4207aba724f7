"""Tests for the chat turn orchestration."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from ragchat.infrastructure.config.chat_models import build_chat_model_catalog
from ragchat.modules.chat.models import MessageRole
from ragchat.modules.chat.services import ChatSessionService
from ragchat.modules.common.constants import DEFAULT_SYSTEM_PROMPT, NO_CONTEXT_ANSWER
from ragchat.modules.common.exceptions import AuthenticationError, NotFoundError, ProviderError
from ragchat.modules.conversation.schemas import ChatTurnRequest
from ragchat.modules.conversation.services import ConversationService
from ragchat.modules.document.models import DocumentSource
from ragchat.modules.ingestion.services import IngestionService
from ragchat.modules.profile.schemas import ProfileUpdate
from ragchat.modules.profile.services import ProfileService


@pytest.fixture
def profile_service():
    return ProfileService(fallback_api_key="sk-test")


@pytest.fixture
def conversation_service(embedding_gateway, completion_gateway, profile_service):
    return ConversationService(
        embedding_gateway=embedding_gateway,
        completion_gateway=completion_gateway,
        profile_service=profile_service,
        catalog=build_chat_model_catalog(),
    )


@pytest_asyncio.fixture
async def chat_id(db_session: AsyncSession) -> int:
    session = await ChatSessionService().create_session("owner-a", db_session)
    return session.id


@pytest_asyncio.fixture
async def fruit_document(db_session: AsyncSession, embedding_gateway, profile_service) -> int:
    """A processed document whose paragraphs mention different keywords."""
    ingestion = IngestionService(embedding_gateway=embedding_gateway, profile_service=profile_service, max_chunk_size=40)
    text = "The apple orchard grows apple trees.\n\nThe river flows past the mountain.\n\nMusic and code."
    result = await ingestion.ingest_text("owner-a", text, "fruit.txt", DocumentSource.PASTE, db_session)
    return result.document_id


@pytest.mark.asyncio
async def test_turn_with_context(
    conversation_service: ConversationService, db_session: AsyncSession, chat_id: int, fruit_document: int, fake_provider
):
    """Test a full turn: retrieval, prompt, completion and stored history."""
    fake_provider.requests.clear()

    result = await conversation_service.send_message(
        "owner-a", chat_id, ChatTurnRequest(message="Tell me about the apple trees", top_k=2), db_session
    )

    assert result.answer == "Die Antwort steht in [1]."
    assert result.model == "gpt-5-nano"
    assert result.usage.total_tokens == 128
    assert [citation.n for citation in result.citations] == [1, 2]
    assert result.citations[0].document_id == fruit_document
    assert result.citations[0].document_name == "fruit.txt"
    assert "apple" in result.citations[0].content

    [completion_request] = fake_provider.requests_to("/chat/completions")
    system_message, user_message = completion_request["body"]["messages"]
    assert system_message["content"].startswith(DEFAULT_SYSTEM_PROMPT + "\n\nKONTEXT:\n[1] fruit.txt (doc:")
    assert user_message == {"role": "user", "content": "Tell me about the apple trees"}
    assert completion_request["body"]["model"] == "gpt-5-nano"

    messages = await ChatSessionService().list_messages("owner-a", chat_id, db_session)
    assert [message.role for message in messages] == [MessageRole.USER, MessageRole.ASSISTANT]
    assert [message.id for message in messages] == [result.user_message_id, result.assistant_message_id]
    assert messages[0].metadata == {"model_requested": "gpt-5-nano"}
    assert messages[1].metadata["model_used"] == "gpt-5-nano"
    assert messages[1].metadata["top_k"] == 2
    assert messages[1].metadata["reply_to"] == result.user_message_id
    assert messages[1].metadata["usage"]["prompt_tokens"] == 120
    assert len(messages[1].metadata["citations"]) == 2


@pytest.mark.asyncio
async def test_turn_without_documents(
    conversation_service: ConversationService, db_session: AsyncSession, chat_id: int, fake_provider
):
    """Test that without chunks the system prompt is only the base prompt."""
    result = await conversation_service.send_message("owner-a", chat_id, ChatTurnRequest(message="Anything?"), db_session)

    assert result.citations == []
    [completion_request] = fake_provider.requests_to("/chat/completions")
    assert completion_request["body"]["messages"][0] == {"role": "system", "content": DEFAULT_SYSTEM_PROMPT}


@pytest.mark.asyncio
async def test_owner_system_prompt_is_used(
    conversation_service: ConversationService,
    profile_service: ProfileService,
    db_session: AsyncSession,
    chat_id: int,
    fake_provider,
):
    await profile_service.update_profile("owner-a", ProfileUpdate(system_prompt="Antworte auf Englisch."), db_session)

    await conversation_service.send_message("owner-a", chat_id, ChatTurnRequest(message="Hi"), db_session)

    [completion_request] = fake_provider.requests_to("/chat/completions")
    assert completion_request["body"]["messages"][0]["content"] == "Antworte auf Englisch."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "requested,expected",
    [("gpt-5.2", "gpt-5.2"), ("unknown-model", "gpt-5-nano"), ("  ", "gpt-5-nano"), (None, "gpt-5-nano")],
)
async def test_model_selection(
    conversation_service: ConversationService, db_session: AsyncSession, chat_id: int, fake_provider, requested, expected
):
    result = await conversation_service.send_message(
        "owner-a", chat_id, ChatTurnRequest(message="Hi", model=requested), db_session
    )

    assert result.model == expected
    assert fake_provider.requests_to("/chat/completions")[0]["body"]["model"] == expected


@pytest.mark.asyncio
async def test_top_k_is_clamped(
    conversation_service: ConversationService, db_session: AsyncSession, chat_id: int, fruit_document: int
):
    result = await conversation_service.send_message(
        "owner-a", chat_id, ChatTurnRequest(message="apple", top_k=50), db_session
    )

    messages = await ChatSessionService().list_messages("owner-a", chat_id, db_session)
    assert messages[-1].metadata["top_k"] == 10
    assert len(result.citations) == 3


@pytest.mark.asyncio
async def test_empty_answer_uses_fallback(
    conversation_service: ConversationService, db_session: AsyncSession, chat_id: int, fake_provider
):
    fake_provider.answer = "   "
    fake_provider.usage = None

    result = await conversation_service.send_message("owner-a", chat_id, ChatTurnRequest(message="Hi"), db_session)

    assert result.answer == NO_CONTEXT_ANSWER
    assert result.usage is None
    messages = await ChatSessionService().list_messages("owner-a", chat_id, db_session)
    assert messages[-1].content == NO_CONTEXT_ANSWER
    assert messages[-1].metadata["usage"] is None


@pytest.mark.asyncio
async def test_other_owner_session(conversation_service: ConversationService, db_session: AsyncSession, chat_id: int):
    with pytest.raises(NotFoundError):
        await conversation_service.send_message("owner-b", chat_id, ChatTurnRequest(message="Hi"), db_session)

    assert await ChatSessionService().list_messages("owner-a", chat_id, db_session) == []


@pytest.mark.asyncio
async def test_missing_key_stores_nothing(embedding_gateway, completion_gateway, db_session: AsyncSession, chat_id: int):
    service = ConversationService(
        embedding_gateway=embedding_gateway,
        completion_gateway=completion_gateway,
        profile_service=ProfileService(fallback_api_key=""),
    )

    with pytest.raises(AuthenticationError):
        await service.send_message("owner-a", chat_id, ChatTurnRequest(message="Hi"), db_session)

    assert await ChatSessionService().list_messages("owner-a", chat_id, db_session) == []


@pytest.mark.asyncio
async def test_completion_failure_keeps_user_message(
    conversation_service: ConversationService, db_session: AsyncSession, chat_id: int, fake_provider
):
    """Test that a failed turn leaves the question without an answer."""
    fake_provider.completion_status = 401

    with pytest.raises(ProviderError):
        await conversation_service.send_message("owner-a", chat_id, ChatTurnRequest(message="Hi"), db_session)

    messages = await ChatSessionService().list_messages("owner-a", chat_id, db_session)
    assert [message.role for message in messages] == [MessageRole.USER]
