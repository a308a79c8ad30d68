"""
SQL implementation of the durable data store.

Each call opens its own session; writes commit before returning. Database
errors are translated into ContentFetchError (reads) and MutationError
(writes).
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import ContentFetchError, MutationError
from database.models import Emote, Profile, ProfilePair, Wallpaper
from database.repositories import (
    ContentRecordRepository,
    FavoriteRepository,
    UserProfileRepository,
)

from .content_models import ContentKind, Identity
from .data_store import ContentQuery, DataStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentTable:
    """Where one content kind is stored."""

    model: type
    type_filter: str | None = None


CONTENT_TABLES: dict[ContentKind, ContentTable] = {
    ContentKind.PICTURE: ContentTable(Profile, "profile"),
    ContentKind.BANNER: ContentTable(Profile, "banner"),
    ContentKind.PAIR: ContentTable(ProfilePair),
    ContentKind.EMOTE: ContentTable(Emote),
    ContentKind.WALLPAPER: ContentTable(Wallpaper),
}


def row_to_record(row: Any) -> dict[str, Any]:
    """Column values of an ORM row as a plain dict."""
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


class SqlDataStore(DataStore):
    """DataStore backed by the async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def query_content(self, kind: ContentKind, query: ContentQuery) -> list[dict[str, Any]]:
        table = CONTENT_TABLES[ContentKind(kind)]
        try:
            async with self._session_factory() as session:
                rows = await ContentRecordRepository(session).list_records(
                    table.model,
                    type_filter=table.type_filter,
                    updated_since=query.updated_since,
                    status=query.status,
                    order_by=query.order_by,
                    descending=query.descending,
                    limit=query.limit,
                )
        except SQLAlchemyError as e:
            logger.error(f"Content query failed for {kind.value}: {e}")
            raise ContentFetchError(
                message=f"Failed to query {kind.value} content",
                details={"kind": kind.value},
            ) from e

        return [row_to_record(row) for row in rows]

    async def query_identities(self, user_ids: set[str]) -> dict[str, Identity]:
        try:
            async with self._session_factory() as session:
                profiles = await UserProfileRepository(session).list_by_user_ids(user_ids)
        except SQLAlchemyError as e:
            logger.error(f"Identity query failed: {e}")
            raise ContentFetchError(message="Failed to query user profiles") from e

        return {
            profile.user_id: Identity(
                user_id=profile.user_id,
                username=profile.username,
                display_name=profile.display_name,
                avatar_url=profile.avatar_url,
            )
            for profile in profiles
        }

    async def add_favorite(self, user_id: str, kind: ContentKind, content_id: str) -> None:
        kind = ContentKind(kind)
        try:
            async with self._session_factory() as session:
                await FavoriteRepository(session).create(user_id, kind.value, content_id)
                await session.commit()
        except SQLAlchemyError as e:
            raise MutationError(
                message="Failed to add favorite",
                details={"kind": kind.value, "content_id": content_id},
            ) from e

    async def remove_favorite(self, user_id: str, kind: ContentKind, content_id: str) -> None:
        kind = ContentKind(kind)
        try:
            async with self._session_factory() as session:
                await FavoriteRepository(session).delete_by_user_and_content(
                    user_id, kind.value, content_id
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise MutationError(
                message="Failed to remove favorite",
                details={"kind": kind.value, "content_id": content_id},
            ) from e

    async def list_favorites(self, user_id: str, kind: ContentKind) -> list[str]:
        kind = ContentKind(kind)
        try:
            async with self._session_factory() as session:
                return await FavoriteRepository(session).list_content_ids(user_id, kind.value)
        except SQLAlchemyError as e:
            raise ContentFetchError(
                message="Failed to load favorites",
                details={"kind": kind.value},
            ) from e

    async def increment_download_count(
        self,
        kind: ContentKind,
        content_id: str,
        previous_count: int,
    ) -> None:
        kind = ContentKind(kind)
        table = CONTENT_TABLES[kind]
        try:
            async with self._session_factory() as session:
                updated = await ContentRecordRepository(session).set_download_count(
                    table.model, content_id, previous_count + 1
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise MutationError(
                message="Failed to update download count",
                details={"kind": kind.value, "content_id": content_id},
            ) from e

        if not updated:
            raise MutationError(
                message="Content no longer exists",
                details={"kind": kind.value, "content_id": content_id},
            )
