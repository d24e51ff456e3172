"""Ghost text overlay: rendering and edit synchronization.

The overlay is display-only text shown after the cursor. It never becomes
part of the buffer unless the user accepts it.

Rendering rules for buffer ``B`` and suggestion ``S``:
- ``S`` empty or equal to ``B``: nothing is shown.
- ``S`` starts with ``B``: COMPLETION mode, only the remaining suffix is shown.
- otherwise: REPLACEMENT mode, a separator followed by the whole of ``S``.

The renderer returns an immutable :class:`Overlay` value; the display layer
applies it as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aicmd.core.session import Suggestion

# Shown before a suggestion that does not continue the buffer
REPLACEMENT_SEPARATOR = "  ⇥  "

# Style class for dimmed suggestion text (zsh equivalent: fg=8)
GHOST_STYLE = "class:aicmd.ghost"

# Progress indicator frames shown while a request is pending
SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"


class OverlayMode(Enum):
    """How the overlay relates to the buffer."""

    NONE = "none"
    COMPLETION = "completion"
    REPLACEMENT = "replacement"
    PROGRESS = "progress"


@dataclass(frozen=True, slots=True)
class Highlight:
    """A styled range over buffer-plus-overlay text (end exclusive)."""

    start: int
    end: int
    style: str = GHOST_STYLE


@dataclass(frozen=True, slots=True)
class Overlay:
    """What the display layer should show after the buffer.

    Attributes:
        text: Overlay text, appended after the buffer.
        mode: Relationship between overlay and buffer.
        highlights: Ordered styled ranges. Offsets count from the start of
            the buffer, so the overlay starts at ``len(buffer)``.
    """

    text: str = ""
    mode: OverlayMode = OverlayMode.NONE
    highlights: tuple[Highlight, ...] = ()

    @property
    def visible(self) -> bool:
        return bool(self.text)


EMPTY_OVERLAY = Overlay()


def _styled(buffer: str, text: str, mode: OverlayMode) -> Overlay:
    start = len(buffer)
    return Overlay(
        text=text,
        mode=mode,
        highlights=(Highlight(start, start + len(text)),),
    )


def render_overlay(buffer: str, suggestion: str | None) -> Overlay:
    """Compute the overlay for ``suggestion`` against the current buffer.

    Args:
        buffer: Current input buffer.
        suggestion: Sanitized suggestion text, or None.

    Returns:
        The overlay value. Empty when there is nothing to show.

    Example:
        >>> render_overlay("find ", "find . -name *.py").text
        '. -name *.py'
    """
    if not suggestion or suggestion == buffer:
        return EMPTY_OVERLAY
    if suggestion.startswith(buffer):
        return _styled(buffer, suggestion[len(buffer):], OverlayMode.COMPLETION)
    return _styled(buffer, REPLACEMENT_SEPARATOR + suggestion, OverlayMode.REPLACEMENT)


def render_progress(buffer: str, tick: int) -> Overlay:
    """Overlay showing one spinner frame while a request is pending."""
    frame = SPINNER_FRAMES[tick % len(SPINNER_FRAMES)]
    return _styled(buffer, f" {frame}", OverlayMode.PROGRESS)


def synchronize(buffer: str, suggestion: Suggestion | None) -> tuple[Suggestion | None, Overlay]:
    """Recompute suggestion and overlay after the buffer changed.

    The suggestion survives while the new buffer is still a literal prefix
    of it (the user is typing toward it); otherwise it is discarded.

    Args:
        buffer: The buffer after the edit.
        suggestion: The active suggestion, if any.

    Returns:
        ``(suggestion, overlay)`` where suggestion is None when discarded.
    """
    if suggestion is None:
        return None, EMPTY_OVERLAY
    if suggestion.text.startswith(buffer):
        return suggestion, render_overlay(buffer, suggestion.text)
    return None, EMPTY_OVERLAY
