"""Conversion of raw Notion pages into canonical items."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from .models import UNTITLED, Item, MediaRef
from .schema import DEFAULT_PROFILE, PropertyCandidate, SchemaProfile, first_match

logger = logging.getLogger(__name__)


def plain_text(segments: Any) -> str:
    """Concatenate the text of a rich-text segment list."""
    if not isinstance(segments, list):
        return ""
    parts: List[str] = []
    for segment in segments:
        if not isinstance(segment, Mapping):
            continue
        text = segment.get("plain_text")
        if text is None:
            inner = segment.get("text")
            if isinstance(inner, Mapping):
                text = inner.get("content")
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts)


def _read_text(candidates, properties) -> str:
    for candidate in candidates:
        text = plain_text(candidate.find(properties))
        if text:
            return text
    return ""


def _read_status(candidates, properties) -> Optional[str]:
    for candidate in candidates:
        value = candidate.find(properties)
        if isinstance(value, Mapping) and value.get("name"):
            return str(value["name"])
    return None


def _read_date(candidates, properties) -> Optional[str]:
    value = first_match(candidates, properties)
    if isinstance(value, Mapping) and value.get("start"):
        return str(value["start"])
    return None


def extract_media(entry: Any) -> Optional[MediaRef]:
    """Return the URL of one file entry, preferring the stable external URL."""
    if not isinstance(entry, Mapping):
        return None
    entry_type = entry.get("type")
    external = entry.get("external")
    hosted = entry.get("file")

    if entry_type in (None, "external") and isinstance(external, Mapping):
        url = external.get("url")
        if isinstance(url, str) and url:
            return MediaRef(url=url, expiring=False)
    if entry_type in (None, "file") and isinstance(hosted, Mapping):
        url = hosted.get("url")
        if isinstance(url, str) and url:
            return MediaRef(url=url, expiring=True)
    return None


def _read_media(media_field: str, properties) -> List[MediaRef]:
    files = PropertyCandidate(media_field, "files").find(properties)
    if not isinstance(files, list):
        return []
    media: List[MediaRef] = []
    for entry in files:
        ref = extract_media(entry)
        if ref is None:
            logger.debug("Skipping media entry without a usable URL in '%s'", media_field)
            continue
        media.append(ref)
    return media


def map_record(
    raw: Any, media_field: str, profile: SchemaProfile = DEFAULT_PROFILE
) -> Item:
    """Map one raw page to an Item, degrading malformed fields to defaults."""
    if not isinstance(raw, Mapping):
        logger.debug("Record is not an object; mapping to an empty item")
        return Item(id="")

    properties = raw.get("properties")
    if not isinstance(properties, Mapping):
        properties = {}

    return Item(
        id=str(raw.get("id") or ""),
        title=_read_text(profile.title, properties) or UNTITLED,
        caption=_read_text(profile.caption, properties),
        status=_read_status(profile.status, properties),
        date=_read_date(profile.date, properties),
        media=tuple(_read_media(media_field, properties)),
    )
