"""Rendering helpers for the embeddable gallery page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .models import Item
from .resize import RESIZE_MESSAGE_TYPE
from .templating import get_environment


def _bounded(raw: Optional[str], default: int, low: int, high: int) -> int:
    try:
        value = int(raw) if raw not in (None, "") else default
    except (TypeError, ValueError):
        value = default
    return max(low, min(value, high))


VIEWS = ("grid", "reels")


def _view(raw: Optional[str]) -> str:
    value = (raw or "").strip().lower()
    return value if value in VIEWS else VIEWS[0]


@dataclass(frozen=True)
class EmbedOptions:
    """Layout knobs accepted on the embed page query string."""

    cols: int = 3
    gap: int = 10
    radius: int = 8
    view: str = "grid"

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "EmbedOptions":
        return cls(
            cols=_bounded(query.get("cols"), 3, 1, 6),
            gap=_bounded(query.get("gap"), 10, 0, 24),
            radius=_bounded(query.get("radius"), 8, 0, 20),
            view=_view(query.get("view")),
        )


def build_embed_html(
    items: Sequence[Item],
    options: EmbedOptions = EmbedOptions(),
    database_id: str = "",
    status: str = "",
    error: Optional[str] = None,
    refresh_seconds: int = 60,
) -> str:
    """Render the gallery grid page using the Jinja2 template."""
    env = get_environment()
    template = env.get_template("embed.html.j2")
    return template.render(
        items=items,
        options=options,
        database_id=database_id,
        status=status,
        error=error,
        refresh_seconds=refresh_seconds,
        resize_type=RESIZE_MESSAGE_TYPE,
    )
