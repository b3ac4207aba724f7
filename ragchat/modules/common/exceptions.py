"""Domain exception classes for business logic errors."""

from typing import Optional


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class AuthenticationError(DomainError):
    """Raised when no provider credential is available for the owner."""

    pass


class InvalidInputError(DomainError):
    """Raised when caller-supplied data is unusable."""

    pass


class NotFoundError(DomainError):
    """Raised when a resource does not exist or belongs to another owner."""

    pass


class ProviderError(DomainError):
    """Raised when the embedding or completion provider rejects a call or is unreachable.

    Attributes:
        status_code: HTTP status returned by the provider, None for transport failures
        body: Raw response body (or transport error text)
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(DomainError):
    """Raised when a provider response does not have the expected shape."""

    pass


class RetrievalError(DomainError):
    """Raised when the similarity search over stored chunks fails."""

    pass


class PersistenceError(DomainError):
    """Raised when a database write fails."""

    pass


class IngestionError(DomainError):
    """Raised when a document ingestion stage fails.

    Attributes:
        stage: Name of the failing stage (document_insert, chunking, embedding, chunk_insert, finalize)
        document_id: Id of the document row, None if it was never created
        cause: The underlying error, if any
    """

    def __init__(
        self,
        stage: str,
        message: str,
        document_id: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.document_id = document_id
        self.cause = cause
