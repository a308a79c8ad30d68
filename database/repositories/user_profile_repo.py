"""
User profile repository for uploader identity lookups.
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import UserProfile


class UserProfileRepository:
    """Repository for UserProfile model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: str) -> UserProfile | None:
        """Get profile by auth provider user ID."""
        result = await self.session.execute(
            select(UserProfile).where(UserProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_by_user_ids(self, user_ids: Iterable[str]) -> list[UserProfile]:
        """Get all profiles for a set of user IDs in one query."""
        ids = list(user_ids)
        if not ids:
            return []

        result = await self.session.execute(
            select(UserProfile).where(UserProfile.user_id.in_(ids))
        )
        return list(result.scalars().all())

    async def create(
        self,
        user_id: str,
        username: str | None = None,
        display_name: str | None = None,
        avatar_url: str | None = None,
    ) -> UserProfile:
        """Create a new user profile."""
        profile = UserProfile(
            user_id=user_id,
            username=username,
            display_name=display_name,
            avatar_url=avatar_url,
        )
        self.session.add(profile)
        await self.session.flush()
        return profile
