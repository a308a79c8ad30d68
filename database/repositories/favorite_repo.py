"""
Favorite repository for the user/content favorites relation.
"""

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Favorite


class FavoriteRepository:
    """Repository for Favorite model operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_and_content(
        self,
        user_id: str,
        content_kind: str,
        content_id: str,
    ) -> Favorite | None:
        """Check if user has favorited a content item."""
        result = await self.session.execute(
            select(Favorite).where(
                Favorite.user_id == user_id,
                Favorite.content_kind == content_kind,
                Favorite.content_id == content_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: str, content_kind: str, content_id: str) -> Favorite:
        """Create a favorite, returning the existing one if already present."""
        existing = await self.get_by_user_and_content(user_id, content_kind, content_id)
        if existing:
            return existing

        favorite = Favorite(
            user_id=user_id,
            content_kind=content_kind,
            content_id=content_id,
        )
        self.session.add(favorite)
        await self.session.flush()
        return favorite

    async def delete_by_user_and_content(
        self,
        user_id: str,
        content_kind: str,
        content_id: str,
    ) -> bool:
        """Remove favorite by user and content."""
        favorite = await self.get_by_user_and_content(user_id, content_kind, content_id)
        if favorite:
            await self.session.delete(favorite)
            await self.session.flush()
            return True
        return False

    async def list_content_ids(self, user_id: str, content_kind: str) -> list[str]:
        """List favorited content IDs of one kind for a user, newest first."""
        result = await self.session.execute(
            select(Favorite.content_id)
            .where(
                Favorite.user_id == user_id,
                Favorite.content_kind == content_kind,
            )
            .order_by(desc(Favorite.created_at))
        )
        return list(result.scalars().all())
