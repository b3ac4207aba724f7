"""Document API endpoints: ingestion, listing and deletion."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from ....infrastructure.config.settings import get_settings
from ....modules.chunk.schemas import ChunkListResponse
from ....modules.chunk.services import ChunkService
from ....modules.common.exceptions import InvalidInputError
from ....modules.document.models import DocumentSource
from ....modules.document.schemas import DocumentCreate, DocumentDetail, DocumentListResponse
from ....modules.document.services import DocumentService
from ....modules.ingestion.schemas import IngestionErrorResponse, IngestionResult
from ....modules.ingestion.services import IngestionService
from ..dependencies import DbSession, OwnerId, get_chunk_service, get_document_service, get_ingestion_service

router = APIRouter(prefix="/documents", tags=["Documents"])

ALLOWED_UPLOAD_TYPES = {"text/plain"}

INGESTION_ERROR_RESPONSES = {
    400: {"description": "Missing API key, or the text produced no chunks", "model": IngestionErrorResponse},
    401: {"description": "Missing X-Owner-Id header"},
    500: {"description": "Storing the document or its chunks failed", "model": IngestionErrorResponse},
    502: {"description": "The embedding provider failed", "model": IngestionErrorResponse},
}


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Ingest Pasted Text",
    description="""
    Stores a pasted text as a document, splits it into chunks, embeds every
    chunk and stores the chunks for retrieval.

    The document is only searchable once all of its chunks are stored. On
    failure it is kept with status `failed` and the response names the
    failing `stage` and the `document_id`.

    - **document_name**: Optional display name (default "Untitled")
    - **raw_text**: The text to ingest (must not be blank)
    """,
    responses=INGESTION_ERROR_RESPONSES,
    response_description="The document id and the number of stored chunks",
)
async def ingest_document(
    document_data: DocumentCreate,
    owner_id: OwnerId,
    db: DbSession,
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> IngestionResult:
    """Ingest pasted text."""
    return await ingestion_service.ingest_text(
        owner_id, document_data.raw_text, document_data.document_name, DocumentSource.PASTE, db
    )


@router.post(
    "/upload",
    status_code=status.HTTP_201_CREATED,
    summary="Ingest Uploaded Text File",
    description="""
    Ingests an uploaded `text/plain` file of at most 1 MiB. The file name
    becomes the document name, cut to 255 characters. The file must be UTF-8
    and not blank.
    """,
    responses=INGESTION_ERROR_RESPONSES,
    response_description="The document id and the number of stored chunks",
)
async def ingest_upload(
    owner_id: OwnerId,
    db: DbSession,
    file: UploadFile = File(..., description="Plain-text file"),
    ingestion_service: IngestionService = Depends(get_ingestion_service),
) -> IngestionResult:
    """Ingest an uploaded text file."""
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_UPLOAD_TYPES:
        raise InvalidInputError("Only .txt files allowed")

    max_bytes = get_settings().MAX_UPLOAD_BYTES
    payload = await file.read(max_bytes + 1)
    if len(payload) > max_bytes:
        raise InvalidInputError(f"File too large (max {max_bytes // (1024 * 1024)}MB)")

    try:
        raw_text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidInputError("File is not valid UTF-8 text") from e

    if not raw_text.strip():
        raise InvalidInputError("File is empty")

    return await ingestion_service.ingest_text(owner_id, raw_text, file.filename, DocumentSource.UPLOAD, db)


@router.get(
    "/",
    summary="List Documents",
    description="""
    Lists the caller's documents, newest first, with ingestion status and
    chunk counts.

    - **page**: Page number (1-indexed, default: 1)
    - **items_per_page**: Number of documents per page (default: 50, max: 100)
    """,
    responses={200: {"description": "Paginated list of documents"}},
)
async def get_documents(
    owner_id: OwnerId,
    db: DbSession,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    items_per_page: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 50,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentListResponse:
    """List the caller's documents."""
    result = await document_service.get_documents(owner_id, db, page, items_per_page)
    return DocumentListResponse(**result)


@router.get(
    "/{document_id}",
    summary="Get Document Details",
    description="Returns one document with its full text, status and chunk count.",
    responses={
        200: {"description": "Document details"},
        404: {"description": "Document not found"},
    },
)
async def get_document(
    document_id: int,
    owner_id: OwnerId,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentDetail:
    """Get one document."""
    return await document_service.get_document(owner_id, document_id, db)


@router.get(
    "/{document_id}/chunks",
    summary="List Document Chunks",
    description="Returns the stored chunks of a document in document order, without embeddings.",
    responses={
        200: {"description": "Paginated list of chunks"},
        404: {"description": "Document not found"},
    },
)
async def get_document_chunks(
    document_id: int,
    owner_id: OwnerId,
    db: DbSession,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    items_per_page: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 50,
    document_service: DocumentService = Depends(get_document_service),
    chunk_service: ChunkService = Depends(get_chunk_service),
) -> ChunkListResponse:
    """List a document's chunks."""
    await document_service.get_document(owner_id, document_id, db)
    result = await chunk_service.get_chunks_by_document(document_id, db, page, items_per_page)
    return ChunkListResponse(**result)


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Document",
    description="Deletes a document; its chunks are removed with it.",
    responses={
        204: {"description": "Document deleted"},
        404: {"description": "Document not found"},
    },
)
async def delete_document(
    document_id: int,
    owner_id: OwnerId,
    db: DbSession,
    document_service: DocumentService = Depends(get_document_service),
) -> Response:
    """Delete a document."""
    await document_service.delete_document(owner_id, document_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
