"""Content-height notifications for an embedding host page."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

RESIZE_MESSAGE_TYPE = "embed-resize"


class HostNotifier(Protocol):
    """Fire-and-forget channel to the embedding host."""

    def post_message(self, message: Dict[str, Any]) -> None:
        """Deliver ``message`` without waiting for a reply."""


@dataclass
class CallbackNotifier:
    """Adapts a plain callable to the host notifier protocol."""

    callback: Callable[[Dict[str, Any]], None]

    def post_message(self, message: Dict[str, Any]) -> None:
        self.callback(message)


class LatestMessageNotifier:
    """Keeps only the most recent undelivered message."""

    def __init__(self) -> None:
        self.pending: Optional[Dict[str, Any]] = None

    def post_message(self, message: Dict[str, Any]) -> None:
        self.pending = message

    def drain(self) -> Optional[Dict[str, Any]]:
        message, self.pending = self.pending, None
        return message


def resize_message(height: Any) -> Dict[str, Any]:
    try:
        value = int(round(float(height or 0)))
    except (TypeError, ValueError, OverflowError):
        value = 0
    return {"type": RESIZE_MESSAGE_TYPE, "height": max(value, 0)}


class ResizeBroadcaster:
    """Reports every observed height of a content region to the host."""

    def __init__(self, notifier: HostNotifier) -> None:
        self.notifier = notifier
        self.attached = False
        self.last_height: Optional[int] = None

    def attach(self, initial_height: Any) -> None:
        """Start observing; the mount measurement is sent immediately."""
        self.attached = True
        self.observe(initial_height)

    def observe(self, height: Any) -> None:
        if not self.attached:
            logger.debug("Ignoring resize after teardown")
            return
        message = resize_message(height)
        self.last_height = message["height"]
        self.notifier.post_message(message)

    def detach(self) -> None:
        self.attached = False
