"""
Download handling: media fetch side effect plus a best-effort counter.

The counter is optimistic and never rolled back. A failed durable
increment leaves the in-memory count ahead of the store until the next
reload re-fetches it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
import aiofiles.os
import httpx

from core.exceptions import ExternalServiceError

from .content_models import ContentItem, ContentKind, MediaFile, get_kind_profile
from .data_store import DataStore

logger = logging.getLogger(__name__)


@dataclass
class SavedFile:
    """Outcome of fetching one media file."""

    url: str
    filename: str
    saved: bool
    path: str | None = None
    error: str | None = None


@dataclass
class DownloadResult:
    """Outcome of one download action."""

    content_id: str
    download_count: int
    persisted: bool
    files: list[SavedFile] = field(default_factory=list)


class MediaDownloader(ABC):
    """Fetches a media file and saves it under a filename."""

    @abstractmethod
    async def fetch(self, media: MediaFile) -> str:
        """
        Fetch and save one file.

        Returns:
            Location the file was saved to

        Raises:
            ExternalServiceError: If the file cannot be fetched or saved
        """


class HttpMediaDownloader(MediaDownloader):
    """Downloads media over HTTP into a local directory."""

    def __init__(
        self,
        download_dir: str | Path,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.download_dir = Path(download_dir)
        self._timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, media: MediaFile) -> str:
        client = await self._get_client()
        try:
            response = await client.get(media.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                message=f"Failed to fetch {media.url}",
                details={"error": str(e)},
            ) from e

        file_path = self.download_dir / Path(media.filename).name
        try:
            await aiofiles.os.makedirs(file_path.parent, exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(response.content)
        except OSError as e:
            raise ExternalServiceError(
                message=f"Failed to save {media.filename}",
                details={"error": str(e)},
            ) from e

        logger.debug(f"Saved {media.url} to {file_path}")
        return str(file_path)


class DownloadCounter:
    """Runs downloads for one content kind and tracks their counters."""

    def __init__(self, data_store: DataStore, downloader: MediaDownloader, kind: ContentKind):
        self._store = data_store
        self._downloader = downloader
        self.kind = ContentKind(kind)
        self._profile = get_kind_profile(self.kind)

    async def record_download(self, item: ContentItem) -> DownloadResult:
        """
        Download an item's media and bump its counter.

        1. Fetch every media file; failures are reported per file.
        2. Increment ``item.download_count`` in memory.
        3. Write ``previous + 1`` to the durable store; no rollback on failure.
        """
        files = [await self._fetch(media) for media in self._profile.media_files(item)]

        previous = item.download_count
        item.download_count = previous + 1

        persisted = True
        try:
            await self._store.increment_download_count(self.kind, item.id, previous)
        except ExternalServiceError as e:
            persisted = False
            logger.warning(
                f"Download count update failed for {self.kind.value}/{item.id}: {e.message}"
            )

        return DownloadResult(
            content_id=item.id,
            download_count=item.download_count,
            persisted=persisted,
            files=files,
        )

    async def _fetch(self, media: MediaFile) -> SavedFile:
        try:
            path = await self._downloader.fetch(media)
        except ExternalServiceError as e:
            logger.error(f"Error downloading {media.url}: {e.message}")
            return SavedFile(url=media.url, filename=media.filename, saved=False, error=e.message)
        return SavedFile(url=media.url, filename=media.filename, saved=True, path=path)
