"""Document ingestion: chunk, embed and store a text as one tracked unit."""

from typing import NoReturn, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.config.settings import get_settings
from ...infrastructure.embedding import EmbeddingGateway, get_embedding_gateway
from ...infrastructure.logging import get_logger
from ..chunk.chunking import chunk_text
from ..chunk.services import ChunkService
from ..common.constants import DEFAULT_DOCUMENT_NAME, MAX_DOCUMENT_NAME_LENGTH
from ..common.exceptions import DomainError, IngestionError, PersistenceError
from ..document.models import DocumentSource
from ..document.services import DocumentService
from ..profile.services import ProfileService
from .schemas import IngestionResult, IngestionStage

logger = get_logger(__name__)


class IngestionService:
    """Turns a raw text into a ``processed`` document with embedded chunks.

    A document row is created first in ``processing`` state; it ends in
    exactly one of two states:

    - ``processed``: every chunk is stored with its embedding
    - ``failed``: no chunk is stored and ``ingestion_error`` holds the reason

    Every failure after the document row exists is raised as an
    ``IngestionError`` naming the stage that failed.
    """

    def __init__(
        self,
        embedding_gateway: Optional[EmbeddingGateway] = None,
        document_service: Optional[DocumentService] = None,
        chunk_service: Optional[ChunkService] = None,
        profile_service: Optional[ProfileService] = None,
        max_chunk_size: Optional[int] = None,
    ):
        self.embedding_gateway = embedding_gateway or get_embedding_gateway()
        self.document_service = document_service or DocumentService()
        self.chunk_service = chunk_service or ChunkService()
        self.profile_service = profile_service or ProfileService()
        self.max_chunk_size = max_chunk_size or get_settings().CHUNK_MAX_SIZE

    async def ingest_text(
        self,
        owner_id: str,
        raw_text: str,
        document_name: Optional[str],
        source: DocumentSource,
        db: AsyncSession,
    ) -> IngestionResult:
        """Store a text as a document, chunk it, embed the chunks and persist them.

        Args:
            owner_id: Owner of the new document
            raw_text: Full text (already checked to be non-blank)
            document_name: Display name, cut to 255 characters, "Untitled" when blank
            source: Whether the text was pasted or uploaded
            db: Database session

        Returns:
            The document id and how many chunks were stored

        Raises:
            AuthenticationError: If the owner has no provider key (nothing is written)
            IngestionError: If any stage fails
        """
        api_key = await self.profile_service.resolve_api_key(owner_id, db)
        name = (document_name or "").strip()[:MAX_DOCUMENT_NAME_LENGTH] or DEFAULT_DOCUMENT_NAME

        try:
            document = await self.document_service.create_document(owner_id, name, raw_text, source, db)
        except PersistenceError as e:
            logger.error(f"Document insert failed: {e}", extra={"stage": IngestionStage.DOCUMENT_INSERT.value})
            raise IngestionError(IngestionStage.DOCUMENT_INSERT.value, str(e), None, e) from e

        document_id = document.id

        try:
            chunks = chunk_text(raw_text, self.max_chunk_size)
        except DomainError as e:
            await self._fail(document_id, IngestionStage.CHUNKING, str(e), e, db)

        if not chunks:
            await self._fail(document_id, IngestionStage.CHUNKING, "No chunks produced", None, db)

        try:
            embeddings = await self.embedding_gateway.embed(api_key, None, [chunk.content for chunk in chunks])
        except DomainError as e:
            await self._fail(document_id, IngestionStage.EMBEDDING, str(e), e, db)

        try:
            await self.chunk_service.insert_chunks(document_id, owner_id, chunks, embeddings, db)
        except DomainError as e:
            await self._remove_chunks(document_id, db)
            await self._fail(document_id, IngestionStage.CHUNK_INSERT, str(e), e, db)

        try:
            await self.document_service.mark_processed(document_id, db)
        except PersistenceError as e:
            await self._remove_chunks(document_id, db)
            await self._fail(document_id, IngestionStage.FINALIZE, str(e), e, db)

        logger.info(
            f"Document {document_id} processed with {len(chunks)} chunks",
            extra={"document_id": document_id, "chunk_count": len(chunks), "source": source.value},
        )
        return IngestionResult(document_id=document_id, chunk_count=len(chunks))

    async def _remove_chunks(self, document_id: int, db: AsyncSession) -> None:
        try:
            await self.chunk_service.delete_chunks_by_document(document_id, db)
        except PersistenceError as e:
            logger.error(
                f"Could not remove chunks of document {document_id}: {e}",
                extra={"document_id": document_id},
            )

    async def _fail(
        self,
        document_id: int,
        stage: IngestionStage,
        message: str,
        cause: Optional[Exception],
        db: AsyncSession,
    ) -> NoReturn:
        """Mark the document failed and raise the stage's ``IngestionError``.

        A failure to record the status is logged; the stage error is raised
        either way.
        """
        logger.warning(
            f"Ingestion of document {document_id} failed at {stage.value}: {message}",
            extra={"document_id": document_id, "stage": stage.value},
        )
        try:
            await self.document_service.mark_failed(document_id, message, db)
        except PersistenceError as e:
            logger.error(
                f"Could not mark document {document_id} as failed: {e}",
                extra={"document_id": document_id, "stage": stage.value},
            )

        raise IngestionError(stage.value, message, document_id, cause) from cause
