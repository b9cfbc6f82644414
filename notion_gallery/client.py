"""Feed consumer: HTTP client, on-screen gallery state and the refresh poller."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Sequence

import requests

from .models import Item
from .navigation import NavigationController, NavigationState
from .resize import ResizeBroadcaster

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 60.0  # stays below the signed file URL expiry


class FeedClientError(RuntimeError):
    """Raised when the feed endpoint cannot be reached or answers an error."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def parse_feed_payload(payload: Any) -> List[Item]:
    """Accept both ``{"items": [...]}`` and a bare array."""
    entries = payload if isinstance(payload, list) else None
    if entries is None and isinstance(payload, dict):
        entries = payload.get("items")
    if not isinstance(entries, list):
        return []
    items = [Item.from_dict(entry) for entry in entries if isinstance(entry, dict)]
    return [item for item in items if item.media]


class FeedClient:
    """Calls ``GET /feed`` on a gallery server."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(
        self,
        database_id: str,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Item]:
        params = {"database_id": database_id}
        if status:
            params["status"] = status
        if limit:
            params["limit"] = str(limit)

        try:
            response = self.session.get(
                f"{self.base_url}/feed", params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise FeedClientError(f"Failed to load feed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise FeedClientError(
                message or f"Feed request failed with HTTP {response.status_code}",
                status=response.status_code,
            )
        return parse_feed_payload(payload)


class GallerySession:
    """What one viewer currently sees: the grid, an error line and the lightbox.

    ``items`` is the displayed list and is replaced wholesale. The lightbox
    keeps navigating the last list that loaded successfully, so a failed
    refresh empties the grid without throwing the viewer out of an open post.
    """

    def __init__(self, broadcaster: Optional[ResizeBroadcaster] = None) -> None:
        self.items: Sequence[Item] = ()
        self.error: Optional[str] = None
        self.loading = False
        self.navigation = NavigationController()
        self.broadcaster = broadcaster

    def apply_items(self, items: Sequence[Item]) -> None:
        self.items = tuple(item for item in items if item.media)
        self.error = None
        self.navigation.replace_items(self.items)

    def apply_error(self, message: str) -> None:
        self.items = ()
        self.error = message or "Failed to load feed."
        self.navigation.replace_items(self.navigation.items)

    def open_item(self, post_index: int) -> Optional[NavigationState]:
        return self.navigation.open_at(post_index, 0)

    def report_height(self, height: Any) -> None:
        if self.broadcaster is not None:
            self.broadcaster.observe(height)


class FeedPoller:
    """Refreshes a gallery session on a fixed interval.

    Requests are not sequenced: a manual ``refresh`` and a scheduled tick may
    overlap, and whichever finishes last decides what is displayed.
    """

    def __init__(
        self,
        client: FeedClient,
        session: GallerySession,
        database_id: str,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.client = client
        self.session = session
        self.database_id = database_id
        self.status = status
        self.limit = limit
        self.interval = interval

    async def refresh(self) -> None:
        if not self.database_id:
            self.session.apply_error("Missing ?database_id=")
            return

        self.session.loading = True
        try:
            items = await asyncio.to_thread(
                self.client.fetch, self.database_id, self.status, self.limit
            )
        except FeedClientError as exc:
            logger.warning("Feed refresh failed: %s", exc)
            self.session.apply_error(str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error during feed refresh")
            self.session.apply_error(str(exc))
        else:
            logger.debug("Feed refresh returned %d items", len(items))
            self.session.apply_items(items)
        finally:
            self.session.loading = False

    async def run(self, stop: asyncio.Event) -> None:
        """Refresh immediately, then every ``interval`` seconds until ``stop`` is set."""
        logger.info("Poller started (interval: %ss)", self.interval)
        while not stop.is_set():
            await self.refresh()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue
        logger.info("Poller stopped")
