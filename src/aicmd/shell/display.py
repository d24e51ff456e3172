"""Ghost text display for prompt_toolkit."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from prompt_toolkit.layout.processors import Processor, Transformation, TransformationInput
from prompt_toolkit.styles import Style

from aicmd.core.overlay import GHOST_STYLE

if TYPE_CHECKING:
    from prompt_toolkit.formatted_text import StyleAndTextTuples

    from aicmd.core.overlay import Overlay
    from aicmd.core.session import Session

# fg=8 in zsh terms
DEFAULT_STYLE = Style.from_dict(
    {
        "aicmd.ghost": "fg:ansibrightblack",
        "aicmd.status": "fg:ansiyellow",
        "bottom-toolbar": "noreverse",
    }
)


def overlay_fragments(overlay: Overlay, buffer_length: int) -> StyleAndTextTuples:
    """Split overlay text into styled fragments following its highlights.

    Highlight offsets count from the start of the buffer; text not covered
    by any highlight keeps the ghost style.
    """
    fragments: StyleAndTextTuples = []
    position = 0
    for highlight in overlay.highlights:
        start = max(highlight.start - buffer_length, position)
        end = min(highlight.end - buffer_length, len(overlay.text))
        if start > position:
            fragments.append((GHOST_STYLE, overlay.text[position:start]))
        if end > start:
            fragments.append((highlight.style, overlay.text[start:end]))
            position = end
    if position < len(overlay.text):
        fragments.append((GHOST_STYLE, overlay.text[position:]))
    return fragments


class GhostTextProcessor(Processor):
    """Append the session overlay after the last line of the input."""

    def __init__(self, get_session: Callable[[], Session]) -> None:
        self.get_session = get_session

    def apply_transformation(self, ti: TransformationInput) -> Transformation:
        session = self.get_session()
        overlay = session.overlay
        if not overlay.visible or ti.lineno != ti.document.line_count - 1:
            return Transformation(fragments=ti.fragments)
        return Transformation(
            fragments=ti.fragments + overlay_fragments(overlay, len(session.buffer))
        )
