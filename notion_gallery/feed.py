"""Canonical feed assembly from a Notion database."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Union

from .access import AccessGuard
from .errors import UpstreamError, ValidationError
from .mapper import map_record
from .models import Item
from .schema import DEFAULT_PROFILE, SchemaProfile, query_with_status_fallback, resolve_media_field

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 30
MAX_LIMIT = 100
REVALIDATE_SECONDS = 60


class RecordSource(Protocol):
    """Minimal protocol for the external database client."""

    def query_database(
        self,
        database_id: str,
        page_size: int,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """Return one page of raw records."""


def clamp_limit(value: Union[int, str, None], default: int = DEFAULT_LIMIT) -> int:
    """Clamp a requested page size to ``[1, MAX_LIMIT]``."""
    if value is None or value == "":
        limit = default
    else:
        try:
            limit = int(value)
        except (TypeError, ValueError):
            limit = default
    return max(1, min(limit, MAX_LIMIT))


class FeedService:
    """Runs guarded, sorted and optionally filtered queries and maps the rows.

    The service keeps no cache; every call reflects the latest query so that
    expiring file URLs get refreshed by periodic callers.
    """

    def __init__(
        self,
        source: RecordSource,
        guard: Optional[AccessGuard] = None,
        profile: SchemaProfile = DEFAULT_PROFILE,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self.source = source
        self.guard = guard or AccessGuard()
        self.profile = profile
        self.default_limit = default_limit

    def build_sorts(self) -> List[Dict[str, Any]]:
        return [{"property": self.profile.date_property, "direction": "descending"}]

    def _query(
        self, database_id: str, page_size: int, status: Optional[str]
    ) -> List[Dict[str, Any]]:
        sorts = self.build_sorts()

        def run_query(filter: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
            return self.source.query_database(
                database_id, page_size=page_size, filter=filter, sorts=sorts
            )

        if status:
            return query_with_status_fallback(
                run_query, self.profile.status_property, status
            )
        try:
            return run_query(None)
        except Exception as exc:
            raise UpstreamError(str(exc) or "Unknown error") from exc

    def get_feed(
        self,
        database_id: Optional[str],
        status: Optional[str] = None,
        limit: Union[int, str, None] = None,
    ) -> List[Item]:
        """Return the canonical items for ``database_id``, newest first."""
        database_id = (database_id or "").strip()
        if not database_id:
            raise ValidationError("Missing database_id.")
        self.guard.check(database_id)

        page_size = clamp_limit(limit, self.default_limit)
        status = (status or "").strip() or None

        logger.info(
            "Fetching feed for database %s (status=%s, limit=%d)",
            database_id,
            status,
            page_size,
        )
        records = self._query(database_id, page_size, status)
        if not records:
            logger.info("Database %s returned no records", database_id)
            return []

        media_field = resolve_media_field(self.profile.media_fields, records[0])
        items: List[Item] = []
        for record in records:
            item = map_record(record, media_field, self.profile)
            if not item.media:
                logger.debug("Dropping record %s without media", item.id or "<unknown>")
                continue
            items.append(item)

        logger.info(
            "Mapped %d of %d records with media from field '%s'",
            len(items),
            len(records),
            media_field,
        )
        return items
