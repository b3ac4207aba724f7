"""Tests for the ingestion pipeline."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ragchat.modules.chunk.services import ChunkService
from ragchat.modules.common.exceptions import AuthenticationError, IngestionError, PersistenceError, ProviderError
from ragchat.modules.document.models import Document, DocumentSource, IngestionStatus
from ragchat.modules.document.services import DocumentService
from ragchat.modules.ingestion.services import IngestionService
from ragchat.modules.profile.services import ProfileService


class FailingChunkService(ChunkService):
    """Stores the first chunk of the batch, then fails."""

    async def insert_chunks(self, document_id, owner_id, chunks, embeddings, db):
        await super().insert_chunks(document_id, owner_id, chunks[:1], embeddings[:1], db)
        raise PersistenceError("disk full")


class FailingFinalizeDocumentService(DocumentService):
    async def mark_processed(self, document_id, db):
        raise PersistenceError("connection lost")


@pytest.fixture
def ingestion_service(embedding_gateway):
    return IngestionService(
        embedding_gateway=embedding_gateway,
        profile_service=ProfileService(fallback_api_key="sk-test"),
        max_chunk_size=900,
    )


async def document_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Document.id)))).scalar_one()


@pytest.mark.asyncio
async def test_ingest_text_processes_document(ingestion_service: IngestionService, db_session: AsyncSession, fake_provider):
    """Test the two-paragraph scenario end to end."""
    raw_text = "a" * 1000 + "\n\n" + "b" * 1050

    result = await ingestion_service.ingest_text("owner-a", raw_text, "  ", DocumentSource.PASTE, db_session)

    assert result.chunk_count == 4
    document = await DocumentService().get_document("owner-a", result.document_id, db_session)
    assert document.ingestion_status == IngestionStatus.PROCESSED
    assert document.document_name == "Untitled"
    assert document.chunk_count == 4

    chunks = await ChunkService().get_chunks_by_document(result.document_id, db_session)
    assert [len(chunk["content"]) for chunk in chunks["data"]] == [900, 100, 900, 150]

    embedding_requests = fake_provider.requests_to("/embeddings")
    assert len(embedding_requests) == 1
    assert len(embedding_requests[0]["body"]["input"]) == 4
    assert embedding_requests[0]["headers"]["authorization"] == "Bearer sk-test"


@pytest.mark.asyncio
async def test_missing_key_writes_nothing(embedding_gateway, db_session: AsyncSession, fake_provider):
    service = IngestionService(embedding_gateway=embedding_gateway, profile_service=ProfileService(fallback_api_key=""))

    with pytest.raises(AuthenticationError):
        await service.ingest_text("owner-a", "Some text", "Notes", DocumentSource.PASTE, db_session)

    assert await document_count(db_session) == 0
    assert fake_provider.requests == []


@pytest.mark.asyncio
async def test_embedding_failure_marks_document_failed(
    ingestion_service: IngestionService, db_session: AsyncSession, fake_provider
):
    fake_provider.embedding_status = 500

    with pytest.raises(IngestionError) as exc_info:
        await ingestion_service.ingest_text("owner-a", "Some text", "Notes", DocumentSource.PASTE, db_session)

    error = exc_info.value
    assert error.stage == "embedding"
    assert isinstance(error.cause, ProviderError)
    assert error.document_id is not None

    document = await DocumentService().get_document("owner-a", error.document_id, db_session)
    assert document.ingestion_status == IngestionStatus.FAILED
    assert document.ingestion_error
    assert document.chunk_count == 0


@pytest.mark.asyncio
async def test_blank_text_produces_no_chunks(ingestion_service: IngestionService, db_session: AsyncSession, fake_provider):
    with pytest.raises(IngestionError) as exc_info:
        await ingestion_service.ingest_text("owner-a", "  \n\n  ", "Notes", DocumentSource.PASTE, db_session)

    assert exc_info.value.stage == "chunking"
    assert exc_info.value.cause is None
    document = await DocumentService().get_document("owner-a", exc_info.value.document_id, db_session)
    assert document.ingestion_status == IngestionStatus.FAILED
    assert document.ingestion_error == "No chunks produced"
    assert fake_provider.requests_to("/embeddings") == []


@pytest.mark.asyncio
async def test_chunk_insert_failure(embedding_gateway, db_session: AsyncSession):
    """Test that a partly written chunk batch is removed when the insert fails."""
    service = IngestionService(
        embedding_gateway=embedding_gateway,
        chunk_service=FailingChunkService(),
        profile_service=ProfileService(fallback_api_key="sk-test"),
        max_chunk_size=900,
    )

    with pytest.raises(IngestionError) as exc_info:
        await service.ingest_text("owner-a", "a" * 1000, "Notes", DocumentSource.UPLOAD, db_session)

    assert exc_info.value.stage == "chunk_insert"
    document_id = exc_info.value.document_id
    assert await ChunkService().count_chunks(document_id, db_session) == 0
    document = await DocumentService().get_document("owner-a", document_id, db_session)
    assert document.ingestion_status == IngestionStatus.FAILED
    assert document.ingestion_error == "disk full"


@pytest.mark.asyncio
async def test_finalize_failure_removes_chunks(embedding_gateway, db_session: AsyncSession):
    """Test that a document that cannot be finalized keeps no chunks."""
    service = IngestionService(
        embedding_gateway=embedding_gateway,
        document_service=FailingFinalizeDocumentService(),
        profile_service=ProfileService(fallback_api_key="sk-test"),
    )

    with pytest.raises(IngestionError) as exc_info:
        await service.ingest_text("owner-a", "First\n\nSecond", "Notes", DocumentSource.PASTE, db_session)

    assert exc_info.value.stage == "finalize"
    document_id = exc_info.value.document_id
    assert await ChunkService().count_chunks(document_id, db_session) == 0
    document = await DocumentService().get_document("owner-a", document_id, db_session)
    assert document.ingestion_status == IngestionStatus.FAILED
    assert document.ingestion_error == "connection lost"


@pytest.mark.asyncio
async def test_long_document_name_is_cut_to_column_size(ingestion_service: IngestionService, db_session: AsyncSession):
    result = await ingestion_service.ingest_text("owner-a", "Some text", "n" * 300, DocumentSource.UPLOAD, db_session)

    document = await DocumentService().get_document("owner-a", result.document_id, db_session)
    assert document.document_name == "n" * 255
