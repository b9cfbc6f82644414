"""Configuration loading for the gallery service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional
from xml.etree import ElementTree as ET

from .access import parse_allow_list
from .notion import NOTION_VERSION
from .schema import DEFAULT_PROFILE, SchemaProfile

logger = logging.getLogger(__name__)

TOKEN_VARIABLE = "NOTION_TOKEN"
ALLOW_LIST_VARIABLE = "ALLOWED_DATABASE_IDS"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass
class FeedConfig:
    default_limit: int = 30
    poll_interval: float = 60.0
    status_property: Optional[str] = None
    date_property: Optional[str] = None


@dataclass
class SchemaOverrides:
    title: List[str] = field(default_factory=list)
    caption: List[str] = field(default_factory=list)
    media: List[str] = field(default_factory=list)


@dataclass
class NotionConfig:
    version: str = NOTION_VERSION
    timeout: float = 10.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    env_file: Optional[str] = None
    server: ServerConfig = field(default_factory=ServerConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    schema: SchemaOverrides = field(default_factory=SchemaOverrides)
    notion: NotionConfig = field(default_factory=NotionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def build_profile(self, base: SchemaProfile = DEFAULT_PROFILE) -> SchemaProfile:
        return base.with_overrides(
            title=self.schema.title,
            caption=self.schema.caption,
            media=self.schema.media,
            status_property=self.feed.status_property,
            date_property=self.feed.date_property,
        )


@dataclass
class AccessSettings:
    """Secrets and allow-list read from the process environment."""

    notion_token: Optional[str] = None
    allowed_raw: str = ""

    @property
    def allow_list(self) -> List[str]:
        return parse_allow_list(self.allowed_raw)

    def masked(self) -> Dict[str, object]:
        return {
            "notion_token": "***MASKED***" if self.notion_token else None,
            "allowed_raw": self.allowed_raw,
        }


def read_access_settings(environ: Optional[Mapping[str, str]] = None) -> AccessSettings:
    env = os.environ if environ is None else environ
    return AccessSettings(
        notion_token=env.get(TOKEN_VARIABLE) or None,
        allowed_raw=env.get(ALLOW_LIST_VARIABLE, ""),
    )


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def _property_names(node: Optional[ET.Element]) -> List[str]:
    if node is None:
        return []
    return [
        child.text.strip()
        for child in node.findall("property")
        if child.text and child.text.strip()
    ]


def parse_env_config(path: Optional[str]) -> Dict[str, str]:
    """Parse environment variables from XML."""
    env_vars: Dict[str, str] = {}
    if not path:
        return env_vars

    logger.info("Loading environment configuration from %s", path)
    try:
        tree = ET.parse(path)
        root = tree.getroot()
        for var in root.findall("variable"):
            name = var.attrib.get("name")
            value = var.text
            if name and value:
                env_vars[name] = value.strip()
    except Exception as exc:
        logger.warning("Failed to load environment config: %s", exc)
        raise

    return env_vars


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    env_node = root.find("env")
    env_file = (
        _resolve_path(config_path, env_node.text.strip())
        if env_node is not None and env_node.text
        else None
    )

    # Server
    server = ServerConfig()
    server_node = root.find("server")
    if server_node is not None:
        server.host = server_node.findtext("host", server.host).strip()
        server.port = int(server_node.findtext("port", str(server.port)))

    # Feed
    feed = FeedConfig()
    feed_node = root.find("feed")
    if feed_node is not None:
        feed.default_limit = int(
            feed_node.findtext("default-limit", str(feed.default_limit))
        )
        feed.poll_interval = float(
            feed_node.findtext("poll-interval", str(feed.poll_interval))
        )
        if feed.poll_interval <= 0:
            raise ValueError("<poll-interval> must be positive.")
        feed.status_property = (feed_node.findtext("status-property") or "").strip() or None
        feed.date_property = (feed_node.findtext("date-property") or "").strip() or None

    # Schema overrides
    schema = SchemaOverrides()
    schema_node = root.find("schema")
    if schema_node is not None:
        schema.title = _property_names(schema_node.find("title"))
        schema.caption = _property_names(schema_node.find("caption"))
        schema.media = _property_names(schema_node.find("media"))

    # Notion
    notion = NotionConfig()
    notion_node = root.find("notion")
    if notion_node is not None:
        notion.version = notion_node.findtext("version", notion.version).strip()
        notion.timeout = float(notion_node.findtext("timeout", str(notion.timeout)))

    # Logging
    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        env_file=env_file,
        server=server,
        feed=feed,
        schema=schema,
        notion=notion,
        logging=logging_config,
    )
