"""Command-line interface for the notion_gallery service."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import os
import pprint
from pathlib import Path
from typing import List, Optional

from .access import AccessGuard
from .config import AppConfig, parse_app_config, parse_env_config, read_access_settings
from .feed import FeedService
from .notion import NotionClient
from .server import build_health_report, serve

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Serve a media gallery feed backed by a Notion database."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the main configuration XML file.",
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )

    parser.add_argument("--host", default=None, help="Bind address. Overrides config.")
    parser.add_argument("--port", type=int, default=None, help="Port. Overrides config.")

    parser.add_argument(
        "--diagnose",
        metavar="DATABASE_ID",
        help="Print identifier normalization and allow-list settings, then exit.",
    )

    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )


def build_service(app_config: AppConfig, settings) -> FeedService:
    client = NotionClient(
        settings.notion_token,
        version=app_config.notion.version,
        timeout=app_config.notion.timeout,
    )
    return FeedService(
        client,
        guard=AccessGuard(settings.allow_list),
        profile=app_config.build_profile(),
        default_limit=app_config.feed.default_limit,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config) if args.config else AppConfig()

        if app_config.env_file:
            env_vars = parse_env_config(app_config.env_file)
            os.environ.update(env_vars)

        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file

        configure_logging(log_level, log_file)

        settings = read_access_settings()

        if args.diagnose is not None:
            print(json.dumps(build_health_report(args.diagnose, settings), indent=2))
            return 0

        if args.host:
            app_config.server.host = args.host
        if args.port is not None:
            app_config.server.port = args.port

        config_dict = dataclasses.asdict(app_config)
        config_dict["access"] = settings.masked()
        logger.info("Active Configuration:\n%s", pprint.pformat(config_dict))

        if not settings.notion_token:
            logger.warning("NOTION_TOKEN is not set; Notion queries will be rejected.")

        service = build_service(app_config, settings)
        serve(service, settings, app_config.server.host, app_config.server.port)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    return 0
