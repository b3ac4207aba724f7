from fastapi import APIRouter

from .chat import router as chat_router
from .documents import router as documents_router
from .profile import router as profile_router

router = APIRouter(prefix="/v1")
router.include_router(documents_router)
router.include_router(chat_router)
router.include_router(profile_router)


@router.get(
    "/health",
    summary="API Health Check",
    description="Simple health check endpoint for monitoring and container orchestration.",
    responses={
        200: {"description": "API is healthy and responding"},
    },
)
async def health_check():
    """Health check endpoint for Docker health checks."""
    return {"status": "healthy", "message": "RAG Chat API is running"}
