"""
Canonical content and identity types shared by every gallery.

Raw store records are coerced into ContentItem here, including tag
normalization, so nothing downstream deals with malformed input.
"""

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"
UNKNOWN_USER = "Unknown User"
DEFAULT_STATUS = "approved"


class ContentKind(str, Enum):
    """Kinds of gallery content."""

    PICTURE = "picture"
    BANNER = "banner"
    PAIR = "pair"
    EMOTE = "emote"
    WALLPAPER = "wallpaper"


@dataclass(frozen=True)
class Identity:
    """Public identity of an uploader."""

    user_id: str
    username: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None

    @property
    def display(self) -> str:
        """Name shown next to an upload: username, then display name."""
        return self.username or self.display_name or UNKNOWN_USER


@dataclass
class ContentItem:
    """
    One gallery item of any kind.

    Pairs carry ``pfp_url`` and ``banner_url``; every other kind uses
    ``image_url``. ``download_count`` is the only field mutated after load.
    """

    id: str
    kind: ContentKind
    owner_id: str | None
    title: str
    category: str = DEFAULT_CATEGORY
    tags: frozenset[str] = frozenset()
    image_url: str | None = None
    pfp_url: str | None = None
    banner_url: str | None = None
    download_count: int = 0
    color: str | None = None
    status: str = DEFAULT_STATUS
    created_at: datetime | None = None
    updated_at: datetime | None = None
    owner: Identity | None = field(default=None, compare=False)

    @property
    def primary_media_url(self) -> str | None:
        """URL used for previews and format checks."""
        if self.kind == ContentKind.PAIR:
            return self.pfp_url or self.banner_url
        return self.image_url

    @property
    def owner_name(self) -> str:
        """Display name of the uploader, "Unknown User" when unresolved."""
        return self.owner.display if self.owner else UNKNOWN_USER


@dataclass(frozen=True)
class MediaFile:
    """A downloadable file belonging to a content item."""

    url: str
    filename: str


@dataclass(frozen=True)
class KindProfile:
    """Per-kind rules: placeholder title and download file naming."""

    kind: ContentKind
    default_title: str
    filename_prefix: str

    def media_files(self, item: ContentItem) -> list[MediaFile]:
        """Files fetched when the item is downloaded."""
        if self.kind == ContentKind.PAIR:
            files = []
            if item.pfp_url:
                files.append(MediaFile(item.pfp_url, build_filename("pfp", item.title, item.pfp_url)))
            if item.banner_url:
                files.append(
                    MediaFile(item.banner_url, build_filename("banner", item.title, item.banner_url))
                )
            return files

        if not item.image_url:
            return []
        return [
            MediaFile(item.image_url, build_filename(self.filename_prefix, item.title, item.image_url))
        ]


KIND_PROFILES: dict[ContentKind, KindProfile] = {
    ContentKind.PICTURE: KindProfile(ContentKind.PICTURE, "Untitled PFP", "pfp"),
    ContentKind.BANNER: KindProfile(ContentKind.BANNER, "Untitled Banner", "banner"),
    ContentKind.PAIR: KindProfile(ContentKind.PAIR, "Untitled Pair", "pair"),
    ContentKind.EMOTE: KindProfile(ContentKind.EMOTE, "Untitled Emote", "emote"),
    ContentKind.WALLPAPER: KindProfile(ContentKind.WALLPAPER, "Untitled Wallpaper", "wallpaper"),
}


def get_kind_profile(kind: ContentKind) -> KindProfile:
    """Get the rules for a content kind."""
    return KIND_PROFILES[ContentKind(kind)]


# ============ Normalization ============


def normalize_tag(tag: Any) -> str:
    """Lower-case and trim a single tag."""
    return str(tag).strip().lower()


def normalize_tags(raw: Any) -> frozenset[str]:
    """
    Coerce a tag field of any shape into a normalized tag set.

    Accepts a list/tuple/set, a JSON-encoded array or string (possibly
    encoded more than once), or a comma-delimited string. Anything else
    becomes the empty set.
    """
    if raw is None:
        return frozenset()

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return frozenset()
        if text.startswith(("[", '"')):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                logger.debug(f"Tags look like JSON but do not parse, splitting instead: {text!r}")
                decoded = text.strip("[]").replace('"', "").split(",")
            return normalize_tags(decoded)
        return normalize_tags(text.split(","))

    if isinstance(raw, (list, tuple, set, frozenset)):
        tags = (normalize_tag(tag) for tag in raw if tag is not None)
        return frozenset(tag for tag in tags if tag)

    logger.debug(f"Unsupported tags value {raw!r}, using empty set")
    return frozenset()


def coerce_timestamp(value: Any) -> datetime | None:
    """Parse a store timestamp into an aware UTC datetime."""
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Unparseable timestamp {value!r}")
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def coerce_count(value: Any) -> int:
    """Coerce a counter to a non-negative integer."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, count)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def content_item_from_record(kind: ContentKind, record: Mapping[str, Any]) -> ContentItem:
    """
    Build a ContentItem from a raw store record.

    Absent optional fields take their defaults; ``updated_at`` falls back
    to ``created_at``.
    """
    kind = ContentKind(kind)
    profile = get_kind_profile(kind)

    created_at = coerce_timestamp(record.get("created_at"))
    updated_at = coerce_timestamp(record.get("updated_at")) or created_at

    return ContentItem(
        id=str(record["id"]),
        kind=kind,
        owner_id=_text(record.get("user_id")),
        title=_text(record.get("title")) or profile.default_title,
        category=_text(record.get("category")) or DEFAULT_CATEGORY,
        tags=normalize_tags(record.get("tags")),
        image_url=_text(record.get("image_url")),
        pfp_url=_text(record.get("pfp_url")),
        banner_url=_text(record.get("banner_url")),
        download_count=coerce_count(record.get("download_count")),
        color=_text(record.get("color")),
        status=_text(record.get("status")) or DEFAULT_STATUS,
        created_at=created_at,
        updated_at=updated_at,
    )


# ============ File naming ============

_UNSAFE_FILENAME_CHARS = re.compile(r"[\s/\\]+")


def media_extension(url: str, default: str = "png") -> str:
    """Extension of the URL path, ignoring query string and fragment."""
    path = urlsplit(url).path
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return default
    ext = name.rsplit(".", 1)[-1].lower()
    return ext or default


def build_filename(prefix: str, title: str, url: str) -> str:
    """Download filename: ``<prefix>_<title_with_underscores>.<ext>``."""
    sanitized = _UNSAFE_FILENAME_CHARS.sub("_", title.strip()).lower()
    return f"{prefix}_{sanitized}.{media_extension(url)}"


def unique_owner_ids(items: Iterable[ContentItem]) -> set[str]:
    """Distinct, non-empty owner ids of a batch of items."""
    return {item.owner_id for item in items if item.owner_id}
