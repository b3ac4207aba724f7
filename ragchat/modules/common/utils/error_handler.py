"""Utility functions for mapping domain exceptions to HTTP exceptions."""

from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ....infrastructure.logging import get_logger
from ..constants import EXCEPTION_MAPPING
from ..exceptions import DomainError, IngestionError

logger = get_logger(__name__)


def map_exception(error: DomainError) -> HTTPException:
    """Map a domain exception to a corresponding HTTP exception.

    An ``IngestionError`` takes the status of the error that caused it; a
    chunking failure without a cause is a client error (the text produced
    no chunks).
    """
    if isinstance(error, IngestionError):
        if isinstance(error.cause, DomainError):
            status_code = map_exception(error.cause).status_code
        elif error.stage == "chunking":
            status_code = status.HTTP_400_BAD_REQUEST
        else:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return HTTPException(status_code=status_code, detail=error.message)

    for exception_class, mapper in EXCEPTION_MAPPING.items():
        if isinstance(error, exception_class):
            return mapper(str(error))

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"An unexpected error occurred: {str(error)}"
    )


def error_body(error: DomainError, http_exception: HTTPException) -> Dict[str, Any]:
    body: Dict[str, Any] = {"detail": http_exception.detail}
    if isinstance(error, IngestionError):
        body["stage"] = error.stage
        body["document_id"] = error.document_id
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for domain exceptions."""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        """Convert domain exceptions to appropriate HTTP responses."""
        http_exception = map_exception(exc)
        if http_exception.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}",
                extra={"error_type": type(exc).__name__, "status_code": http_exception.status_code},
            )
        return JSONResponse(
            status_code=http_exception.status_code,
            content=error_body(exc, http_exception),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
