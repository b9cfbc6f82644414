"""Thin HTTP client for the Notion database query endpoint."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

NOTION_API_URL = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"


class NotionAPIError(RuntimeError):
    """Raised when Notion rejects a request or cannot be reached."""

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.code = code


class NotionClient:
    """Queries a single page of database rows."""

    def __init__(
        self,
        token: Optional[str],
        version: str = NOTION_VERSION,
        timeout: float = 10.0,
        base_url: str = NOTION_API_URL,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.token = token
        self.version = version
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Injected session, or one session per server thread."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Notion-Version": self.version,
            "Content-Type": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def query_database(
        self,
        database_id: str,
        page_size: int,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Dict[str, Any]]:
        """Return the ``results`` of one database query page."""
        body: Dict[str, Any] = {"page_size": page_size}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts

        url = f"{self.base_url}/databases/{database_id}/query"
        logger.debug("Querying Notion database %s with %s", database_id, body)
        try:
            response = self.session.post(
                url, json=body, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise NotionAPIError(f"Failed to reach Notion: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.ok:
            message = payload.get("message") if isinstance(payload, dict) else None
            code = payload.get("code") if isinstance(payload, dict) else None
            raise NotionAPIError(
                message or f"Notion responded with HTTP {response.status_code}",
                status=response.status_code,
                code=code,
            )

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise NotionAPIError("Notion response is missing the results list.")
        return results
