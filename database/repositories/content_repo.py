"""
Content repository for reading content rows and writing download counts.
"""

from datetime import datetime

from sqlalchemy import asc, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import ContentColumnsMixin

ORDERABLE_COLUMNS = ("updated_at", "created_at", "download_count", "title")


class ContentRecordRepository:
    """Repository for operations shared by every content table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_records(
        self,
        model: type[ContentColumnsMixin],
        type_filter: str | None = None,
        updated_since: datetime | None = None,
        status: str | None = None,
        order_by: str = "updated_at",
        descending: bool = True,
        limit: int | None = None,
    ) -> list:
        """
        List content rows with optional filtering.

        Args:
            model: Content table model
            type_filter: Value of the ``type`` column (profiles table only)
            updated_since: Lower bound on updated_at
            status: Moderation status to match
            order_by: Column to order by
            descending: Sort direction
            limit: Max number of results
        """
        if order_by not in ORDERABLE_COLUMNS:
            raise ValueError(f"Cannot order content by {order_by!r}")

        query = select(model)

        if type_filter is not None:
            query = query.where(model.type == type_filter)

        if updated_since is not None:
            query = query.where(model.updated_at >= updated_since)

        if status is not None:
            query = query.where(model.status == status)

        column = getattr(model, order_by)
        query = query.order_by(desc(column) if descending else asc(column), asc(model.id))

        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def set_download_count(
        self,
        model: type[ContentColumnsMixin],
        content_id: str,
        download_count: int,
    ) -> bool:
        """Overwrite the download counter of one row. Returns False if the row is gone."""
        result = await self.session.execute(
            update(model)
            .where(model.id == content_id)
            .values(download_count=download_count)
        )
        await self.session.flush()
        return result.rowcount > 0
