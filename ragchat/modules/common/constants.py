"""Common constants used across the application."""

from typing import Callable, Dict, Type

from fastapi import HTTPException, status

from .exceptions import (
    AuthenticationError,
    DomainError,
    InvalidInputError,
    MalformedResponseError,
    NotFoundError,
    PersistenceError,
    ProviderError,
    RetrievalError,
)

NO_CONTEXT_ANSWER = "Nicht in der Wissensbasis."

DEFAULT_SYSTEM_PROMPT = "\n".join(
    [
        "Du bist ein RAG-Assistent.",
        "Nutze ausschliesslich den bereitgestellten KONTEXT um zu antworten.",
        "Wenn der Kontext nicht ausreicht, sage klar: 'Nicht in der Wissensbasis'.",
        "Gib am Ende eine Quellenliste im Format [1], [2], ... passend zu den verwendeten Textstellen.",
    ]
)

DEFAULT_CHAT_TITLE = "New chat"
MAX_CHAT_TITLE_LENGTH = 120
DEFAULT_DOCUMENT_NAME = "Untitled"
MAX_DOCUMENT_NAME_LENGTH = 255

EXCEPTION_MAPPING: Dict[Type[DomainError], Callable[[str], HTTPException]] = {
    AuthenticationError: lambda message: HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message),
    InvalidInputError: lambda message: HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message),
    NotFoundError: lambda message: HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message),
    ProviderError: lambda message: HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message),
    MalformedResponseError: lambda message: HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message),
    RetrievalError: lambda message: HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message),
    PersistenceError: lambda message: HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message),
}
