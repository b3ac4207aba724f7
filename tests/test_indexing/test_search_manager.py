"""Tests for VectorSearchManager over stored chunks."""

from typing import List

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from ragchat.infrastructure.indexing import VectorSearchManager
from ragchat.modules.chunk.chunking import TextChunk
from ragchat.modules.chunk.services import ChunkService
from ragchat.modules.document.models import DocumentSource
from ragchat.modules.document.services import DocumentService


async def stored_document(
    owner_id: str,
    embeddings: List[List[float]],
    db: AsyncSession,
    processed: bool = True,
) -> int:
    document_service = DocumentService()
    document = await document_service.create_document(owner_id, "Doc", "text", DocumentSource.PASTE, db)
    chunks = [TextChunk(index=i, content=f"{owner_id} chunk {i}") for i in range(len(embeddings))]
    await ChunkService().insert_chunks(document.id, owner_id, chunks, embeddings, db)
    if processed:
        await document_service.mark_processed(document.id, db)
    return document.id


@pytest.mark.asyncio
async def test_search_ranks_owner_chunks(db_session: AsyncSession):
    """Test that the most similar chunk of the owner comes first."""
    document_id = await stored_document("owner-a", [[1.0, 0.0], [0.0, 1.0], [0.6, 0.8]], db_session)

    results = await VectorSearchManager().search("owner-a", [0.0, 1.0], 2, db_session)

    assert [result.chunk_index for result in results] == [1, 2]
    assert all(result.document_id == document_id for result in results)
    assert results[0].similarity_score == pytest.approx(1.0)
    assert results[1].similarity_score == pytest.approx(0.8)


@pytest.mark.asyncio
async def test_search_is_scoped_to_owner(db_session: AsyncSession):
    await stored_document("owner-b", [[0.0, 1.0]], db_session)
    await stored_document("owner-a", [[1.0, 0.0]], db_session)

    results = await VectorSearchManager().search("owner-a", [0.0, 1.0], 5, db_session)

    assert len(results) == 1
    assert results[0].content == "owner-a chunk 0"


@pytest.mark.asyncio
async def test_search_skips_unprocessed_documents(db_session: AsyncSession):
    """Test that chunks of documents still processing are not candidates."""
    await stored_document("owner-a", [[0.0, 1.0]], db_session, processed=False)

    assert await VectorSearchManager().search("owner-a", [0.0, 1.0], 5, db_session) == []


@pytest.mark.asyncio
async def test_search_without_chunks(db_session: AsyncSession):
    assert await VectorSearchManager().search("nobody", [1.0, 0.0], 3, db_session) == []


@pytest.mark.asyncio
async def test_ties_follow_storage_order(db_session: AsyncSession):
    first = await stored_document("owner-a", [[1.0, 0.0]], db_session)
    second = await stored_document("owner-a", [[1.0, 0.0]], db_session)

    results = await VectorSearchManager().search("owner-a", [1.0, 0.0], 2, db_session)

    assert [result.document_id for result in results] == [first, second]
