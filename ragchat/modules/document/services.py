"""Document store service: document rows, their ingestion status and lookups."""

from typing import Any, Dict, Iterable, Optional

from fastcrud.paginated.response import paginated_response
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.database.models import utcnow
from ...infrastructure.logging import get_logger
from ..chunk.models import Chunk
from ..common.exceptions import NotFoundError, PersistenceError
from .crud import document_crud
from .models import Document, DocumentSource, IngestionStatus
from .schemas import DocumentCreateInternal, DocumentDetail, DocumentRead

logger = get_logger(__name__)


class DocumentService:
    """Service for an owner's documents.

    Every read and delete is scoped to ``owner_id``; a document that exists
    but belongs to someone else is reported as not found.
    """

    async def create_document(
        self,
        owner_id: str,
        document_name: str,
        raw_text: str,
        source: DocumentSource,
        db: AsyncSession,
    ) -> Document:
        """Insert a document in the ``processing`` state.

        Args:
            owner_id: Owner of the document
            document_name: Display name
            raw_text: Full text
            source: Whether the text was pasted or uploaded
            db: Database session

        Returns:
            The created document row

        Raises:
            PersistenceError: If the insert fails
        """
        document_internal = DocumentCreateInternal(
            owner_id=owner_id,
            document_name=document_name,
            raw_text=raw_text,
            source=source,
        )

        try:
            created: Document = await document_crud.create(db=db, object=document_internal)
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to create document: {e}") from e

        return created

    async def mark_processed(self, document_id: int, db: AsyncSession) -> None:
        """Set a document to ``processed`` and clear any previous error."""
        await self._set_status(document_id, IngestionStatus.PROCESSED, None, db)

    async def mark_failed(self, document_id: int, error: str, db: AsyncSession) -> None:
        """Set a document to ``failed`` with the reason."""
        await self._set_status(document_id, IngestionStatus.FAILED, error, db)

    async def _set_status(
        self, document_id: int, status: IngestionStatus, error: Optional[str], db: AsyncSession
    ) -> None:
        stmt = (
            update(Document)
            .where(Document.id == document_id)
            .values(ingestion_status=status.value, ingestion_error=error, updated_at=utcnow())
        )
        try:
            await db.execute(stmt)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to set document {document_id} to {status.value}: {e}") from e

    async def get_document(self, owner_id: str, document_id: int, db: AsyncSession) -> DocumentDetail:
        """Get one of the owner's documents with its chunk count.

        Raises:
            NotFoundError: If the document does not exist for this owner
        """
        stmt = await document_crud.select(id=document_id, owner_id=owner_id)
        stmt = (
            stmt.add_columns(func.count(Chunk.id).label("chunk_count"))
            .outerjoin(Chunk, Document.id == Chunk.document_id)
            .group_by(Document.id)
        )

        result = await db.execute(stmt)
        row = result.first()
        if not row:
            raise NotFoundError("Document not found")

        return DocumentDetail(**self._row_to_dict(row), raw_text=row.raw_text)

    async def get_documents(
        self,
        owner_id: str,
        db: AsyncSession,
        page: int = 1,
        items_per_page: int = 50,
    ) -> dict[str, Any]:
        """Get the owner's documents, newest first, with chunk counts.

        Args:
            owner_id: Owner whose documents to list
            db: Database session
            page: Page number (1-indexed)
            items_per_page: Number of documents per page

        Returns:
            Paginated response with documents and counts
        """
        offset = (page - 1) * items_per_page

        stmt = await document_crud.select(owner_id=owner_id, sort_columns="id", sort_orders="desc")
        stmt = (
            stmt.add_columns(func.count(Chunk.id).label("chunk_count"))
            .outerjoin(Chunk, Document.id == Chunk.document_id)
            .group_by(Document.id)
            .offset(offset)
            .limit(items_per_page)
        )

        result = await db.execute(stmt)
        rows = result.fetchall()

        total_count = await document_crud.count(db=db, owner_id=owner_id)

        documents = [DocumentRead(**self._row_to_dict(row)).model_dump() for row in rows]
        crud_data = {"data": documents, "total_count": total_count}

        return paginated_response(crud_data, page, items_per_page)

    async def delete_document(self, owner_id: str, document_id: int, db: AsyncSession) -> None:
        """Delete one of the owner's documents; its chunks go with it.

        Raises:
            NotFoundError: If the document does not exist for this owner
            PersistenceError: If the delete fails
        """
        exists = await document_crud.exists(db=db, id=document_id, owner_id=owner_id)
        if not exists:
            raise NotFoundError("Document not found")

        try:
            await db.execute(delete(Document).where(Document.id == document_id, Document.owner_id == owner_id))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to delete document {document_id}: {e}") from e

        logger.info(f"Deleted document {document_id}", extra={"document_id": document_id})

    async def get_document_names(self, owner_id: str, document_ids: Iterable[int], db: AsyncSession) -> Dict[int, str]:
        """Map document ids to display names.

        Ids that do not exist or belong to another owner are simply absent
        from the result.
        """
        ids = set(document_ids)
        if not ids:
            return {}

        stmt = select(Document.id, Document.document_name).where(Document.id.in_(ids), Document.owner_id == owner_id)
        result = await db.execute(stmt)
        return {row.id: row.document_name for row in result.fetchall()}

    @staticmethod
    def _row_to_dict(row: Any) -> Dict[str, Any]:
        return {
            "id": row.id,
            "owner_id": row.owner_id,
            "document_name": row.document_name,
            "source": row.source,
            "document_type": row.document_type,
            "ingestion_status": row.ingestion_status,
            "ingestion_error": row.ingestion_error,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
            "chunk_count": row.chunk_count,
        }
