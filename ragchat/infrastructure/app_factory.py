from asyncio import Event
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Dict, List, Optional

import anyio
import fastapi
from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.openapi.utils import get_openapi

from ..modules.common.utils.error_handler import register_exception_handlers
from .config.settings import (
    DatabaseSettings,
    EnvironmentOption,
    EnvironmentSettings,
    Settings,
    get_settings,
)
from .database.session import create_tables
from .logging import (
    configure_logging,
    generate_correlation_id,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)

CORRELATION_ID_HEADER = "X-Request-ID"

logger = get_logger(__name__)


async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    """Configure the number of threadpool tokens for anyio."""
    limiter = anyio.to_thread.current_default_thread_limiter()
    limiter.total_tokens = number_of_tokens


async def correlation_id_middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Bind a request id to every log record emitted while handling the request.

    The id is taken from the ``X-Request-ID`` header when present, otherwise
    generated, and echoed back on the response.
    """
    correlation_id = request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
    token = set_correlation_id(correlation_id)
    try:
        response = await call_next(request)
    finally:
        reset_correlation_id(token)

    response.headers[CORRELATION_ID_HEADER] = correlation_id
    return response


def lifespan_factory(
    settings: Settings,
    create_tables_on_startup: bool = True,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Factory to create a lifespan async context manager for a FastAPI app.

    Args:
        settings: Application settings
        create_tables_on_startup: Whether to create database tables on startup

    Returns:
        An async context manager for FastAPI's lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        initialization_complete = Event()
        app.state.initialization_complete = initialization_complete

        configure_logging()
        await set_threadpool_tokens()

        try:
            if isinstance(settings, DatabaseSettings) and create_tables_on_startup:
                await create_tables()
                logger.info("Database tables ready")

            initialization_complete.set()
            yield

        finally:
            logger.info(f"{settings.APP_NAME} shutting down")

    return lifespan


def create_application(
    router: APIRouter,
    settings: Optional[Settings] = None,
    lifespan: Optional[Callable[[FastAPI], AbstractAsyncContextManager[None]]] = None,
    create_tables_on_startup: Optional[bool] = None,
    enable_cors: Optional[bool] = None,
    cors_origins: Optional[List[str]] = None,
    enable_docs_in_production: Optional[bool] = None,
    docs_production_dependency: Optional[Callable[..., Any]] = None,
    enable_gzip: Optional[bool] = None,
    title: Optional[str] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    version: Optional[str] = None,
    **kwargs: Any,
) -> FastAPI:
    """Creates and configures a FastAPI application based on the provided settings.

    Args:
        router: The APIRouter containing the routes for the application
        settings: Application settings (uses get_settings() if None)
        lifespan: Optional lifespan function for the FastAPI app. If None, uses the default
            lifespan_factory which configures logging and creates tables.
        create_tables_on_startup: Whether to create database tables on startup.
            Defaults to settings.CREATE_TABLES_ON_STARTUP if None.
        enable_cors: Whether to enable CORS middleware.
            Defaults to settings.CORS_ENABLED if None.
        cors_origins: List of allowed origins for CORS.
            Defaults to settings.CORS_ORIGINS_LIST if None.
        enable_docs_in_production: Whether to enable API docs in production.
            Defaults to settings.ENABLE_DOCS_IN_PRODUCTION if None.
        docs_production_dependency: Dependency to protect docs in production.
        enable_gzip: Whether to enable GZip compression middleware.
            Defaults to settings.GZIP_ENABLED if None.
        title: The title of the API. Defaults to settings.APP_NAME.
        summary: A short summary of the API.
        description: A detailed description of the API (supports Markdown).
            Defaults to settings.APP_DESCRIPTION.
        version: The version of the API. Defaults to settings.VERSION.
        **kwargs: Additional keyword arguments passed to FastAPI constructor

    Returns:
        A configured FastAPI application
    """

    if settings is None:
        settings = get_settings()

    _create_tables_on_startup = (
        settings.CREATE_TABLES_ON_STARTUP if create_tables_on_startup is None else create_tables_on_startup
    )
    _enable_cors = settings.CORS_ENABLED if enable_cors is None else enable_cors
    _cors_origins = settings.CORS_ORIGINS_LIST if cors_origins is None else cors_origins
    _enable_docs_in_production = (
        settings.ENABLE_DOCS_IN_PRODUCTION if enable_docs_in_production is None else enable_docs_in_production
    )
    _enable_gzip = settings.GZIP_ENABLED if enable_gzip is None else enable_gzip

    metadata: Dict[str, Any] = {
        "title": title or settings.APP_NAME,
        "description": description or settings.APP_DESCRIPTION,
        "version": version or settings.VERSION,
    }
    if summary is not None:
        metadata["summary"] = summary

    kwargs.update(metadata)

    # Docs are served by the routes below so they can carry a dependency.
    kwargs.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    if lifespan is None:
        lifespan = lifespan_factory(settings, create_tables_on_startup=_create_tables_on_startup)

    application = FastAPI(lifespan=lifespan, **kwargs)

    application.include_router(router)
    register_exception_handlers(application)

    if settings.LOG_CORRELATION_ID:
        application.middleware("http")(correlation_id_middleware)

    if _enable_cors:
        # Credentials cannot be combined with a wildcard origin.
        allow_credentials = settings.CORS_ALLOW_CREDENTIALS and "*" not in _cors_origins
        application.add_middleware(
            CORSMiddleware,
            allow_origins=_cors_origins,
            allow_credentials=allow_credentials,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[CORRELATION_ID_HEADER],
        )

    if _enable_gzip:
        application.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MINIMUM_SIZE)

    show_docs = isinstance(settings, EnvironmentSettings) and (
        settings.ENVIRONMENT != EnvironmentOption.PRODUCTION or _enable_docs_in_production
    )

    if show_docs:
        docs_router = APIRouter()

        if docs_production_dependency is not None:
            docs_router = APIRouter(dependencies=[Depends(docs_production_dependency)])

        @docs_router.get(settings.DOCS_URL, include_in_schema=False)
        async def get_swagger_documentation() -> fastapi.responses.HTMLResponse:
            return get_swagger_ui_html(openapi_url=settings.OPENAPI_URL, title="docs")

        @docs_router.get(settings.REDOC_URL, include_in_schema=False)
        async def get_redoc_documentation() -> fastapi.responses.HTMLResponse:
            return get_redoc_html(openapi_url=settings.OPENAPI_URL, title="redoc")

        @docs_router.get(settings.OPENAPI_URL, include_in_schema=False)
        async def openapi() -> Dict[str, Any]:
            return get_openapi(
                title=metadata["title"],
                version=metadata["version"],
                description=metadata["description"],
                routes=application.routes,
            )

        application.include_router(docs_router)

    return application
