"""Profile API endpoints: provider key, system prompt and connection test."""

from fastapi import APIRouter, Depends

from ....infrastructure.completion import CompletionGateway
from ....infrastructure.logging import get_logger
from ....modules.profile.schemas import ConnectionTestRequest, ConnectionTestResponse, ProfileRead, ProfileUpdate
from ....modules.profile.services import ProfileService
from ..dependencies import DbSession, OwnerId, get_completion_gateway_dependency, get_profile_service

logger = get_logger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get(
    "",
    summary="Get Profile",
    description="Returns the caller's profile. The stored key is never returned, only whether one is set and its last four characters.",
)
async def get_profile(
    owner_id: OwnerId,
    db: DbSession,
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileRead:
    return await profile_service.get_profile(owner_id, db)


@router.put(
    "",
    summary="Update Profile",
    description="""
    Updates the provider key and/or the system prompt.

    - **openai_api_key**: New key; an empty string removes it
    - **system_prompt**: New base instruction; an empty string restores the default

    Omitted fields are left unchanged.
    """,
)
async def update_profile(
    update_data: ProfileUpdate,
    owner_id: OwnerId,
    db: DbSession,
    profile_service: ProfileService = Depends(get_profile_service),
) -> ProfileRead:
    """Update the caller's profile."""
    return await profile_service.update_profile(owner_id, update_data, db)


@router.post(
    "/connection-test",
    summary="Test Provider Connection",
    description="""
    Sends a tiny completion request with the given key, or the stored key
    when none is given, and checks that the provider replies "ok".
    """,
    responses={
        200: {"description": "The key works"},
        400: {"description": "No key available"},
        502: {"description": "The provider rejected the key or replied unexpectedly"},
    },
)
async def test_connection(
    test_request: ConnectionTestRequest,
    owner_id: OwnerId,
    db: DbSession,
    profile_service: ProfileService = Depends(get_profile_service),
    completion_gateway: CompletionGateway = Depends(get_completion_gateway_dependency),
) -> ConnectionTestResponse:
    """Check that a provider key works."""
    api_key = (test_request.api_key or "").strip() or await profile_service.resolve_api_key(owner_id, db)
    await completion_gateway.check_connection(api_key)
    logger.info("Provider connection test passed", extra={"owner_id": owner_id})
    return ConnectionTestResponse(ok=True, model=completion_gateway.connection_test_model)
