"""Owner profile service: provider credential and system prompt."""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.config.settings import get_settings
from ...infrastructure.database.models import utcnow
from ..common.constants import DEFAULT_SYSTEM_PROMPT
from ..common.exceptions import AuthenticationError, PersistenceError
from .crud import profile_crud
from .models import Profile
from .schemas import ProfileCreateInternal, ProfileRead, ProfileUpdate


class ProfileService:
    """Service for per-owner settings.

    Profiles are created lazily the first time an owner's profile is read or
    updated. When an owner has no key of their own, the deployment-wide
    ``OPENAI_API_KEY`` is used.
    """

    def __init__(self, fallback_api_key: Optional[str] = None):
        self.fallback_api_key = get_settings().OPENAI_API_KEY if fallback_api_key is None else fallback_api_key

    async def _get_profile_row(self, owner_id: str, db: AsyncSession) -> Optional[Profile]:
        return await db.get(Profile, owner_id)

    async def get_or_create_profile(self, owner_id: str, db: AsyncSession) -> Profile:
        profile = await self._get_profile_row(owner_id, db)
        if profile is not None:
            return profile

        try:
            created: Profile = await profile_crud.create(db=db, object=ProfileCreateInternal(owner_id=owner_id))
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to create profile: {e}") from e
        return created

    async def get_profile(self, owner_id: str, db: AsyncSession) -> ProfileRead:
        """Get the owner's profile, creating an empty one if needed."""
        return self.to_read(await self.get_or_create_profile(owner_id, db))

    async def update_profile(self, owner_id: str, update_data: ProfileUpdate, db: AsyncSession) -> ProfileRead:
        """Update the key and/or system prompt.

        Fields left out of the request are unchanged; blank values clear the
        stored value.

        Raises:
            PersistenceError: If the update fails
        """
        profile = await self.get_or_create_profile(owner_id, db)

        for field, value in update_data.model_dump(exclude_unset=True).items():
            setattr(profile, field, (value or "").strip() or None)
        profile.updated_at = utcnow()

        try:
            await db.commit()
            await db.refresh(profile)
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(f"Failed to update profile: {e}") from e

        return self.to_read(profile)

    async def resolve_api_key(self, owner_id: str, db: AsyncSession) -> str:
        """Return the provider key to use for this owner.

        Raises:
            AuthenticationError: If neither the profile nor the deployment has a key
        """
        profile = await self._get_profile_row(owner_id, db)
        key = ((profile.openai_api_key if profile else None) or "").strip() or (self.fallback_api_key or "").strip()
        if not key:
            raise AuthenticationError("Missing OpenAI API key. Set it via /api/v1/profile.")
        return key

    async def resolve_system_prompt(self, owner_id: str, db: AsyncSession) -> str:
        """Return the owner's stored system prompt, or the default one when blank."""
        profile = await self._get_profile_row(owner_id, db)
        stored = ((profile.system_prompt if profile else None) or "").strip()
        return stored or DEFAULT_SYSTEM_PROMPT

    @staticmethod
    def to_read(profile: Profile) -> ProfileRead:
        key = (profile.openai_api_key or "").strip()
        return ProfileRead(
            owner_id=profile.owner_id,
            has_api_key=bool(key),
            api_key_last4=key[-4:] if key else None,
            system_prompt=profile.system_prompt,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )
