"""Chat API endpoints: sessions, history and chat turns."""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from ....infrastructure.config.chat_models import ChatModelCatalog
from ....modules.chat.schemas import (
    ChatModelListResponse,
    ChatModelRead,
    ChatSessionRead,
    ChatSessionRename,
    MessageListResponse,
)
from ....modules.chat.services import ChatSessionService
from ....modules.conversation.schemas import ChatTurnRequest, ChatTurnResult
from ....modules.conversation.services import ConversationService
from ..dependencies import DbSession, OwnerId, get_chat_session_service, get_conversation_service, get_model_catalog

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.get(
    "/models",
    summary="List Chat Models",
    description="Lists the selectable chat models with list prices and the default model.",
)
async def list_models(catalog: ChatModelCatalog = Depends(get_model_catalog)) -> ChatModelListResponse:
    models = [
        ChatModelRead(
            id=model.id,
            label=model.label,
            input_per_1m=model.pricing.input_per_1m,
            output_per_1m=model.pricing.output_per_1m,
        )
        for model in catalog.models
    ]
    return ChatModelListResponse(models=models, default_model=catalog.default_model)


@router.post(
    "/sessions",
    status_code=status.HTTP_201_CREATED,
    summary="Create Chat Session",
    description='Creates an empty chat session titled "New chat".',
    responses={201: {"description": "Session created"}},
)
async def create_session(
    owner_id: OwnerId,
    db: DbSession,
    chat_service: ChatSessionService = Depends(get_chat_session_service),
) -> ChatSessionRead:
    """Create a chat session."""
    return await chat_service.create_session(owner_id, db)


@router.get(
    "/sessions",
    summary="List Chat Sessions",
    description="Lists the caller's chat sessions, most recently active first.",
)
async def list_sessions(
    owner_id: OwnerId,
    db: DbSession,
    chat_service: ChatSessionService = Depends(get_chat_session_service),
) -> List[ChatSessionRead]:
    return await chat_service.list_sessions(owner_id, db)


@router.patch(
    "/sessions/{chat_id}",
    summary="Rename Chat Session",
    description="Sets a new title. The title is trimmed and cut to 120 characters and must not be blank.",
    responses={
        200: {"description": "Session renamed"},
        400: {"description": "Blank title"},
        404: {"description": "Chat not found"},
    },
)
async def rename_session(
    chat_id: int,
    rename_data: ChatSessionRename,
    owner_id: OwnerId,
    db: DbSession,
    chat_service: ChatSessionService = Depends(get_chat_session_service),
) -> ChatSessionRead:
    """Rename a chat session."""
    return await chat_service.rename_session(owner_id, chat_id, rename_data.title, db)


@router.delete(
    "/sessions/{chat_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Chat Session",
    description="Deletes a chat session and all of its messages.",
    responses={
        204: {"description": "Session deleted"},
        404: {"description": "Chat not found"},
    },
)
async def delete_session(
    chat_id: int,
    owner_id: OwnerId,
    db: DbSession,
    chat_service: ChatSessionService = Depends(get_chat_session_service),
) -> Response:
    """Delete a chat session."""
    await chat_service.delete_session(owner_id, chat_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/sessions/{chat_id}/messages",
    summary="Get Chat History",
    description="Returns the session's messages in the order they were stored. Answers carry model, usage and citations in `metadata`.",
    responses={
        200: {"description": "Message history"},
        404: {"description": "Chat not found"},
    },
)
async def list_messages(
    chat_id: int,
    owner_id: OwnerId,
    db: DbSession,
    chat_service: ChatSessionService = Depends(get_chat_session_service),
) -> MessageListResponse:
    messages = await chat_service.list_messages(owner_id, chat_id, db)
    return MessageListResponse(chat_id=chat_id, messages=messages)


@router.post(
    "/sessions/{chat_id}/messages",
    summary="Send Chat Message",
    description="""
    Answers a question from the caller's processed documents.

    The question is stored, embedded and used to retrieve the most similar
    chunks. The chunks are numbered and placed in the system prompt, and the
    model's answer is stored with the citations it was given.

    - **message**: The question (must not be blank)
    - **model**: Optional chat model id; unknown ids fall back to the default
    - **top_k**: Optional number of chunks to retrieve, clamped to 1..10 (default 6)

    When nothing relevant is found the model is asked to reply with
    "Nicht in der Wissensbasis.".
    """,
    responses={
        200: {"description": "Answer with citations and token usage"},
        400: {"description": "Missing API key or invalid input"},
        404: {"description": "Chat not found"},
        500: {"description": "Retrieval or storage failed"},
        502: {"description": "The provider failed or returned a malformed response"},
    },
)
async def send_message(
    chat_id: int,
    turn_request: ChatTurnRequest,
    owner_id: OwnerId,
    db: DbSession,
    conversation_service: ConversationService = Depends(get_conversation_service),
) -> ChatTurnResult:
    """Run one retrieval-augmented chat turn."""
    return await conversation_service.send_message(owner_id, chat_id, turn_request, db)
