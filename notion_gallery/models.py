"""Shared data models for notion_gallery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

UNTITLED = "Untitled"
VIDEO_EXTENSIONS = (".mp4", ".mov", ".webm")


def is_likely_video(url: Optional[str]) -> bool:
    """Guess whether a media URL points at a video from its extension."""
    if not url:
        return False
    path = url.split("?", 1)[0].lower()
    return path.endswith(VIDEO_EXTENSIONS)


def _text_or(value: Any, default: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return default


@dataclass(frozen=True)
class MediaRef:
    """A single media URL attached to an item."""

    url: str
    expiring: bool = False

    @property
    def kind(self) -> str:
        return "video" if is_likely_video(self.url) else "image"


@dataclass(frozen=True)
class Item:
    """Canonical gallery item built from one database record.

    Items are snapshots: expiring media URLs differ between fetches for the
    same ``id``, so consumers replace whole lists instead of patching them.
    """

    id: str
    title: str = UNTITLED
    caption: str = ""
    status: Optional[str] = None
    date: Optional[str] = None
    media: Tuple[MediaRef, ...] = field(default_factory=tuple)

    @property
    def images(self) -> List[str]:
        return [ref.url for ref in self.media]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "caption": self.caption,
            "date": self.date,
            "status": self.status,
            "images": self.images,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        """Rebuild an item from the HTTP wire shape."""
        urls = data.get("images")
        if urls is None:
            urls = data.get("media")
        if not isinstance(urls, (list, tuple)):
            urls = []
        media = tuple(MediaRef(url=url) for url in urls if isinstance(url, str) and url)
        date = data.get("date")
        if date is None:
            date = data.get("postDate")
        return cls(
            id=str(data.get("id") or ""),
            title=_text_or(data.get("title"), UNTITLED),
            caption=_text_or(data.get("caption"), ""),
            status=_text_or(data.get("status"), None),
            date=_text_or(date, None),
            media=media,
        )
