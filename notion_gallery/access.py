"""Allow-list checks for requested database identifiers."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from .errors import AccessDenied

logger = logging.getLogger(__name__)

WILDCARD = "*"
_SEPARATORS = re.compile(r"[-\s]")


def normalize_identifier(value: Optional[str]) -> str:
    """Strip separator characters so dashed and undashed ids compare equal."""
    if not value:
        return ""
    return _SEPARATORS.sub("", value)


def parse_allow_list(raw: Optional[str]) -> List[str]:
    """Split a comma-separated allow-list setting into trimmed entries."""
    if not raw:
        return []
    return [entry.strip() for entry in raw.split(",") if entry.strip()]


def allows_any(allow_list: Sequence[str]) -> bool:
    """Return True when the list is open or the single wildcard entry."""
    entries = [entry.strip() for entry in allow_list if entry and entry.strip()]
    if not entries:
        return True
    return len(entries) == 1 and entries[0] == WILDCARD


def is_allowed(requested_id: Optional[str], allow_list: Sequence[str]) -> bool:
    """Return whether ``requested_id`` passes the allow-list.

    The wildcard is matched on the raw entries, before separators are
    stripped; any other entry is compared in normalized form.
    """
    if allows_any(allow_list):
        return True
    normalized = normalize_identifier(requested_id)
    if not normalized:
        return False
    allowed = {normalize_identifier(entry) for entry in allow_list}
    allowed.discard("")
    return normalized in allowed


class AccessGuard:
    """Allow-list bound to one configuration."""

    def __init__(self, allow_list: Sequence[str] = ()) -> None:
        self.allow_list = list(allow_list)

    @classmethod
    def from_setting(cls, raw: Optional[str]) -> "AccessGuard":
        return cls(parse_allow_list(raw))

    @property
    def open(self) -> bool:
        return allows_any(self.allow_list)

    def is_allowed(self, requested_id: Optional[str]) -> bool:
        return is_allowed(requested_id, self.allow_list)

    def check(self, requested_id: Optional[str]) -> None:
        if not self.is_allowed(requested_id):
            logger.warning("Rejected database id %s", requested_id)
            raise AccessDenied("This database_id is not allowed.")
