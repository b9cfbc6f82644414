"""Schema discovery for Notion databases with drifting property layouts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import UpstreamError

logger = logging.getLogger(__name__)

STATUS_OPERATOR = "status"
LEGACY_STATUS_OPERATOR = "select"
STATUS_OPERATORS = (STATUS_OPERATOR, LEGACY_STATUS_OPERATOR)


@dataclass(frozen=True)
class PropertyCandidate:
    """A property name and the value type expected under it.

    ``name=None`` matches the first property whose ``type`` is
    ``value_type``.
    """

    name: Optional[str]
    value_type: str

    def find(self, properties: Mapping[str, Any]) -> Any:
        """Return the typed value for this candidate, or None."""
        if not isinstance(properties, Mapping):
            return None
        if self.name is not None:
            return _typed_value(properties.get(self.name), self.value_type)
        for prop in properties.values():
            if isinstance(prop, Mapping) and prop.get("type") == self.value_type:
                return _typed_value(prop, self.value_type)
        return None


def _typed_value(prop: Any, value_type: str) -> Any:
    if not isinstance(prop, Mapping):
        return None
    declared = prop.get("type")
    if declared is not None and declared != value_type:
        return None
    return prop.get(value_type)


@dataclass(frozen=True)
class SchemaProfile:
    """Ordered candidate lists describing one family of database layouts."""

    title: Tuple[PropertyCandidate, ...]
    caption: Tuple[PropertyCandidate, ...]
    status: Tuple[PropertyCandidate, ...]
    date: Tuple[PropertyCandidate, ...]
    media_fields: Tuple[str, ...]
    status_property: str = "Status"
    date_property: str = "Post Date"

    def with_overrides(
        self,
        title: Sequence[str] = (),
        caption: Sequence[str] = (),
        media: Sequence[str] = (),
        status_property: Optional[str] = None,
        date_property: Optional[str] = None,
    ) -> "SchemaProfile":
        """Return a profile with deployment-specific names tried first."""
        status_name = status_property or self.status_property
        date_name = date_property or self.date_property
        status = self.status
        if status_property:
            status = (
                PropertyCandidate(status_name, STATUS_OPERATOR),
                PropertyCandidate(status_name, LEGACY_STATUS_OPERATOR),
            ) + status
        date = self.date
        if date_property:
            date = (PropertyCandidate(date_name, "date"),) + date
        return replace(
            self,
            title=tuple(PropertyCandidate(n, "title") for n in title) + self.title,
            caption=tuple(PropertyCandidate(n, "rich_text") for n in caption)
            + self.caption,
            status=status,
            date=date,
            media_fields=tuple(media) + self.media_fields,
            status_property=status_name,
            date_property=date_name,
        )


DEFAULT_PROFILE = SchemaProfile(
    title=(
        PropertyCandidate("Post Title", "title"),
        PropertyCandidate("Title", "title"),
        PropertyCandidate("Name", "title"),
        PropertyCandidate("Post Title", "rich_text"),
        PropertyCandidate(None, "title"),
    ),
    caption=(
        PropertyCandidate("Caption", "rich_text"),
        PropertyCandidate("Description", "rich_text"),
        PropertyCandidate("Text", "rich_text"),
    ),
    status=(
        PropertyCandidate("Status", STATUS_OPERATOR),
        PropertyCandidate("Status", LEGACY_STATUS_OPERATOR),
    ),
    date=(
        PropertyCandidate("Post Date", "date"),
        PropertyCandidate("Date", "date"),
        PropertyCandidate("Publish Date", "date"),
    ),
    media_fields=(
        "Media (URLs or leave blank)",
        "Media",
        "Files & media",
        "Images",
        "Files",
    ),
)


def first_match(
    candidates: Sequence[PropertyCandidate], properties: Mapping[str, Any]
) -> Any:
    """Return the value of the first candidate that structurally matches."""
    for candidate in candidates:
        value = candidate.find(properties)
        if value is not None:
            return value
    return None


def resolve_media_field(
    candidates: Sequence[str], sample_record: Optional[Mapping[str, Any]]
) -> str:
    """Pick the media property name for a whole result page.

    The first candidate present on the sample record wins; when none is
    present the first candidate is returned as a best effort.
    """
    if not candidates:
        raise ValueError("At least one media field candidate is required.")
    properties: Mapping[str, Any] = {}
    if isinstance(sample_record, Mapping):
        sample_properties = sample_record.get("properties")
        if isinstance(sample_properties, Mapping):
            properties = sample_properties
    for name in candidates:
        if name in properties:
            logger.debug("Resolved media field '%s'", name)
            return name
    logger.debug(
        "No media field candidate present on sample record; defaulting to '%s'",
        candidates[0],
    )
    return candidates[0]


def build_status_filter(operator: str, property_name: str, value: str) -> Dict[str, Any]:
    """Return a Notion filter object matching ``value`` on a status-like property."""
    if operator not in STATUS_OPERATORS:
        raise ValueError(f"Unsupported status operator: {operator}")
    return {"property": property_name, operator: {"equals": value}}


def query_with_status_fallback(
    run_query: Callable[[Dict[str, Any]], List[Dict[str, Any]]],
    property_name: str,
    value: str,
) -> List[Dict[str, Any]]:
    """Run a filtered query, falling back once to the legacy select operator."""
    modern = build_status_filter(STATUS_OPERATOR, property_name, value)
    try:
        return run_query(modern)
    except Exception as exc:  # noqa: BLE001 - any failure triggers the fallback
        logger.warning(
            "Status filter on '%s' failed (%s); retrying with legacy select operator",
            property_name,
            exc,
        )

    legacy = build_status_filter(LEGACY_STATUS_OPERATOR, property_name, value)
    try:
        return run_query(legacy)
    except Exception as exc:
        raise UpstreamError(str(exc) or "Unknown error") from exc
