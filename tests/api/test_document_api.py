"""API tests for document endpoints."""

from typing import Dict

import pytest
from httpx import AsyncClient


class TestDocumentAPI:
    """API tests for document endpoints."""

    @pytest.mark.asyncio
    async def test_requires_owner_header(self, client: AsyncClient):
        response = await client.get("/api/v1/documents/")

        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_ingest_pasted_text(self, client: AsyncClient, configured_owner: Dict[str, str]):
        """Test successful ingestion of pasted text."""
        response = await client.post(
            "/api/v1/documents/",
            json={"document_name": "Notes", "raw_text": "First paragraph.\n\nSecond paragraph."},
            headers=configured_owner,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["chunk_count"] == 1
        assert "document_id" in data

        detail = await client.get(f"/api/v1/documents/{data['document_id']}", headers=configured_owner)
        assert detail.status_code == 200
        document = detail.json()
        assert document["document_name"] == "Notes"
        assert document["source"] == "paste"
        assert document["ingestion_status"] == "processed"
        assert document["chunk_count"] == 1
        assert document["raw_text"] == "First paragraph.\n\nSecond paragraph."

    @pytest.mark.asyncio
    async def test_ingest_without_api_key(self, client: AsyncClient, owner_headers: Dict[str, str], fake_provider):
        response = await client.post("/api/v1/documents/", json={"raw_text": "Some text"}, headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing OpenAI API key. Set it via /api/v1/profile."
        assert fake_provider.requests == []

        listing = await client.get("/api/v1/documents/", headers=owner_headers)
        assert listing.json()["total_count"] == 0

    @pytest.mark.asyncio
    async def test_ingest_blank_text_is_rejected(self, client: AsyncClient, configured_owner: Dict[str, str]):
        response = await client.post("/api/v1/documents/", json={"raw_text": "   "}, headers=configured_owner)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_ingest_embedding_failure(self, client: AsyncClient, configured_owner: Dict[str, str], fake_provider):
        """Test that a provider failure reports the stage and leaves a failed document."""
        fake_provider.embedding_status = 500

        response = await client.post("/api/v1/documents/", json={"raw_text": "Some text"}, headers=configured_owner)

        assert response.status_code == 502
        body = response.json()
        assert body["stage"] == "embedding"
        assert body["document_id"] is not None

        detail = await client.get(f"/api/v1/documents/{body['document_id']}", headers=configured_owner)
        assert detail.json()["ingestion_status"] == "failed"
        assert detail.json()["chunk_count"] == 0

    @pytest.mark.asyncio
    async def test_upload_text_file(self, client: AsyncClient, configured_owner: Dict[str, str]):
        response = await client.post(
            "/api/v1/documents/upload",
            files={"file": ("notes.txt", "Uploaded apple notes.".encode("utf-8"), "text/plain; charset=utf-8")},
            headers=configured_owner,
        )

        assert response.status_code == 201
        document_id = response.json()["document_id"]

        detail = await client.get(f"/api/v1/documents/{document_id}", headers=configured_owner)
        assert detail.json()["document_name"] == "notes.txt"
        assert detail.json()["source"] == "upload"

    @pytest.mark.asyncio
    async def test_upload_rejects_other_types(self, client: AsyncClient, configured_owner: Dict[str, str]):
        response = await client.post(
            "/api/v1/documents/upload",
            files={"file": ("notes.pdf", b"%PDF-1.7", "application/pdf")},
            headers=configured_owner,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Only .txt files allowed"

    @pytest.mark.asyncio
    async def test_upload_rejects_large_files(self, client: AsyncClient, configured_owner: Dict[str, str]):
        response = await client.post(
            "/api/v1/documents/upload",
            files={"file": ("big.txt", b"a" * (1024 * 1024 + 1), "text/plain")},
            headers=configured_owner,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "File too large (max 1MB)"

    @pytest.mark.asyncio
    async def test_upload_rejects_empty_and_binary_files(self, client: AsyncClient, configured_owner: Dict[str, str]):
        empty = await client.post(
            "/api/v1/documents/upload",
            files={"file": ("empty.txt", b"  \n ", "text/plain")},
            headers=configured_owner,
        )
        binary = await client.post(
            "/api/v1/documents/upload",
            files={"file": ("binary.txt", b"\xff\xfe\x00bad", "text/plain")},
            headers=configured_owner,
        )

        assert empty.status_code == 400
        assert empty.json()["detail"] == "File is empty"
        assert binary.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_with_long_filename(self, client: AsyncClient, configured_owner: Dict[str, str]):
        filename = "n" * 300 + ".txt"

        response = await client.post(
            "/api/v1/documents/upload",
            files={"file": (filename, b"Apple notes.", "text/plain")},
            headers=configured_owner,
        )

        assert response.status_code == 201
        detail = await client.get(f"/api/v1/documents/{response.json()['document_id']}", headers=configured_owner)
        assert detail.json()["document_name"] == filename[:255]

    @pytest.mark.asyncio
    async def test_list_documents_is_owner_scoped(
        self, client: AsyncClient, configured_owner: Dict[str, str], other_owner_headers: Dict[str, str]
    ):
        for name in ("One", "Two", "Three"):
            await client.post("/api/v1/documents/", json={"document_name": name, "raw_text": name}, headers=configured_owner)

        response = await client.get("/api/v1/documents/?page=1&items_per_page=2", headers=configured_owner)
        foreign = await client.get("/api/v1/documents/", headers=other_owner_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 3
        assert data["has_more"] is True
        assert [doc["document_name"] for doc in data["data"]] == ["Three", "Two"]
        assert foreign.json()["total_count"] == 0

    @pytest.mark.asyncio
    async def test_get_document_chunks(self, client: AsyncClient, configured_owner: Dict[str, str], other_owner_headers):
        text = "a" * 1000 + "\n\n" + "b" * 1050
        created = await client.post("/api/v1/documents/", json={"raw_text": text}, headers=configured_owner)
        document_id = created.json()["document_id"]

        response = await client.get(f"/api/v1/documents/{document_id}/chunks", headers=configured_owner)
        foreign = await client.get(f"/api/v1/documents/{document_id}/chunks", headers=other_owner_headers)

        assert created.json()["chunk_count"] == 4
        assert response.status_code == 200
        assert [chunk["chunk_index"] for chunk in response.json()["data"]] == [0, 1, 2, 3]
        assert foreign.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_document(self, client: AsyncClient, configured_owner: Dict[str, str], other_owner_headers):
        created = await client.post("/api/v1/documents/", json={"raw_text": "Delete me"}, headers=configured_owner)
        document_id = created.json()["document_id"]

        foreign = await client.delete(f"/api/v1/documents/{document_id}", headers=other_owner_headers)
        response = await client.delete(f"/api/v1/documents/{document_id}", headers=configured_owner)
        again = await client.get(f"/api/v1/documents/{document_id}", headers=configured_owner)

        assert foreign.status_code == 404
        assert response.status_code == 204
        assert again.status_code == 404
        assert again.json()["detail"] == "Document not found"
