"""Lightbox navigation over a feed of posts and their slides.

The state machine is two-dimensional: a post index into the item list and a
slide index into that post's media. The transition functions are pure; they
take the current state and the current item list and return the next state.
``None`` is the closed state. Every transition first re-clamps the state
against the list it is given, so a refetch that shrinks the feed can never
leave the lightbox pointing past the end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationState:
    post_index: int
    slide_index: int


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _slide_count(items: Sequence[Any], post_index: int) -> int:
    media = getattr(items[post_index], "media", None) or ()
    return len(media)


def _last_slide(items: Sequence[Any], post_index: int) -> int:
    return max(_slide_count(items, post_index) - 1, 0)


def revalidate(
    state: Optional[NavigationState], items: Sequence[Any]
) -> Optional[NavigationState]:
    """Clamp ``state`` to ``items``; an empty list closes the lightbox."""
    if state is None or not items:
        return None
    post = _clamp(state.post_index, 0, len(items) - 1)
    slide = _clamp(state.slide_index, 0, _last_slide(items, post))
    if post == state.post_index and slide == state.slide_index:
        return state
    return NavigationState(post, slide)


def open_at(
    items: Sequence[Any], post_index: int, slide_index: int = 0
) -> Optional[NavigationState]:
    return revalidate(NavigationState(post_index, slide_index), items)


def step_prev(
    state: Optional[NavigationState], items: Sequence[Any]
) -> Optional[NavigationState]:
    state = revalidate(state, items)
    if state is None:
        return None
    if state.slide_index > 0:
        return NavigationState(state.post_index, state.slide_index - 1)
    if state.post_index > 0:
        return NavigationState(state.post_index - 1, 0)
    return state


def step_next(
    state: Optional[NavigationState], items: Sequence[Any]
) -> Optional[NavigationState]:
    state = revalidate(state, items)
    if state is None:
        return None
    if state.slide_index < _last_slide(items, state.post_index):
        return NavigationState(state.post_index, state.slide_index + 1)
    if state.post_index < len(items) - 1:
        return NavigationState(state.post_index + 1, 0)
    return state


def jump_slide(
    state: Optional[NavigationState], items: Sequence[Any], index: int
) -> Optional[NavigationState]:
    state = revalidate(state, items)
    if state is None:
        return None
    slide = _clamp(index, 0, _last_slide(items, state.post_index))
    return NavigationState(state.post_index, slide)


def close(state: Optional[NavigationState]) -> None:
    return None


class NavigationController:
    """Holds the lightbox state for the item list currently on screen."""

    KEY_BINDINGS = {
        "Escape": "close",
        "ArrowLeft": "step_prev",
        "ArrowRight": "step_next",
    }

    def __init__(self, items: Sequence[Any] = ()) -> None:
        self.items: Sequence[Any] = tuple(items)
        self.state: Optional[NavigationState] = None

    @property
    def is_open(self) -> bool:
        return self.state is not None

    def replace_items(self, items: Sequence[Any]) -> Optional[NavigationState]:
        """Swap in a freshly fetched list and re-clamp the open state."""
        self.items = tuple(items)
        previous = self.state
        self.state = revalidate(self.state, self.items)
        if previous is not None and self.state is None:
            logger.debug("Closing lightbox: item list is empty")
        return self.state

    def open_at(self, post_index: int, slide_index: int = 0) -> Optional[NavigationState]:
        self.state = open_at(self.items, post_index, slide_index)
        return self.state

    def step_prev(self) -> Optional[NavigationState]:
        self.state = step_prev(self.state, self.items)
        return self.state

    def step_next(self) -> Optional[NavigationState]:
        self.state = step_next(self.state, self.items)
        return self.state

    def jump_slide(self, index: int) -> Optional[NavigationState]:
        self.state = jump_slide(self.state, self.items, index)
        return self.state

    def close(self) -> None:
        self.state = close(self.state)

    def handle_key(self, key: str) -> Optional[NavigationState]:
        """Apply the transition bound to a keyboard key, if any."""
        action = self.KEY_BINDINGS.get(key)
        if action is None or self.state is None:
            return self.state
        getattr(self, action)()
        return self.state

    @property
    def current_item(self) -> Any:
        if self.state is None:
            return None
        return self.items[self.state.post_index]

    @property
    def current_media(self) -> Any:
        item = self.current_item
        if item is None or not item.media:
            return None
        return item.media[self.state.slide_index]

    @property
    def has_prev(self) -> bool:
        return self.state is not None and (
            self.state.slide_index > 0 or self.state.post_index > 0
        )

    @property
    def has_next(self) -> bool:
        if self.state is None:
            return False
        return (
            self.state.slide_index < _last_slide(self.items, self.state.post_index)
            or self.state.post_index < len(self.items) - 1
        )
