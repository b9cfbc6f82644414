"""HTTP surface exposing the feed, diagnostics and the embed page."""

from __future__ import annotations

import json
import logging
from functools import partial
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

from .access import allows_any, normalize_identifier, parse_allow_list
from .config import AccessSettings
from .errors import FeedError
from .feed import REVALIDATE_SECONDS, FeedService
from .renderers import EmbedOptions, build_embed_html

logger = logging.getLogger(__name__)


def build_health_report(
    database_id: str, settings: AccessSettings, host: Optional[str] = None
) -> Dict[str, Any]:
    """Echo identifier normalization and allow-list settings, never the token."""
    allowed_raw = settings.allowed_raw or ""
    entries = parse_allow_list(allowed_raw)
    return {
        "ok": True,
        "domain": host,
        "db": {"raw": database_id, "normalized": normalize_identifier(database_id)},
        "env": {
            "hasToken": bool(settings.notion_token),
            "allowedAny": allows_any(entries),
            "allowedList": [normalize_identifier(entry) for entry in entries],
            "allowedRaw": allowed_raw,
        },
    }


class GalleryHandler(BaseHTTPRequestHandler):
    def __init__(self, *args, service: FeedService, settings: AccessSettings, **kwargs):
        self.service = service
        self.settings = settings
        super().__init__(*args, **kwargs)

    def _query(self) -> Dict[str, str]:
        parsed = parse_qs(urlparse(self.path).query)
        return {key: values[0] for key, values in parsed.items() if values}

    def _send(self, status: int, body: bytes, content_type: str, headers: Dict[str, str] = None):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-store")
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(body)

    def _json_response(self, data: Any, status: int = 200, headers: Dict[str, str] = None):
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self._send(status, body, "application/json; charset=utf-8", headers)

    def do_GET(self):
        path = urlparse(self.path).path.rstrip("/") or "/"
        if path in ("/feed", "/api/feed"):
            self._handle_feed()
        elif path in ("/health", "/api/health"):
            self._handle_health()
        elif path in ("/", "/embed"):
            self._handle_embed()
        else:
            self._json_response({"error": "Not found"}, status=404)

    def _handle_feed(self):
        query = self._query()
        try:
            items = self.service.get_feed(
                query.get("database_id"), query.get("status"), query.get("limit")
            )
        except FeedError as exc:
            if exc.status_code >= 500:
                logger.error("Feed request failed: %s", exc)
            self._json_response(
                {"error": str(exc) or "Unknown error"}, status=exc.status_code
            )
            return
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while building feed")
            self._json_response({"error": str(exc) or "Unknown error"}, status=500)
            return

        self._json_response(
            {"items": [item.to_dict() for item in items]},
            headers={
                "CDN-Cache-Control": f"max-age=0, s-maxage={REVALIDATE_SECONDS}"
            },
        )

    def _handle_health(self):
        query = self._query()
        report = build_health_report(
            query.get("database_id", ""), self.settings, self.headers.get("Host")
        )
        self._json_response(report)

    def _handle_embed(self):
        query = self._query()
        database_id = query.get("database_id", "")
        status = query.get("status", "")
        items = []
        error = None
        if not database_id:
            error = "Missing ?database_id="
        else:
            try:
                items = self.service.get_feed(database_id, status, query.get("limit"))
            except FeedError as exc:
                error = str(exc) or "Failed to load feed."
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected error while rendering embed page")
                error = str(exc) or "Failed to load feed."

        html = build_embed_html(
            items,
            EmbedOptions.from_query(query),
            database_id=database_id,
            status=status,
            error=error,
            refresh_seconds=REVALIDATE_SECONDS,
        )
        self._send(200, html.encode("utf-8"), "text/html; charset=utf-8")

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)


def create_server(
    service: FeedService, settings: AccessSettings, host: str = "0.0.0.0", port: int = 3000
) -> ThreadingHTTPServer:
    handler = partial(GalleryHandler, service=service, settings=settings)
    return ThreadingHTTPServer((host, port), handler)


def serve(service: FeedService, settings: AccessSettings, host: str, port: int) -> None:
    server = create_server(service, settings, host, port)
    logger.info("Serving gallery on http://%s:%d", host, server.server_address[1])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
