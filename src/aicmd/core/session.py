"""Session state for one interactive line-editing session."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from aicmd.core.overlay import EMPTY_OVERLAY, Overlay


class SessionState(Enum):
    """Persistent states of the suggestion state machine."""

    IDLE = "idle"
    REQUESTING = "requesting"
    DISPLAYING = "displaying"


class RequestOutcome(Enum):
    """How a suggestion request ended."""

    IGNORED = "ignored"  # empty buffer, or a request already in flight
    CANCELLED = "cancelled"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


class Resolution(Enum):
    """How a displayed suggestion was resolved."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    DIVERGED = "diverged"
    LINE_ENDED = "line_ended"


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A sanitized suggestion and the buffer it was requested for.

    Attributes:
        raw: Text as received from the provider.
        text: Sanitized, display-ready text.
        requested_for: Snapshot of the buffer when the request was made.
    """

    raw: str
    text: str
    requested_for: str


@dataclass
class Session:
    """Mutable state of a single interactive session.

    Owned by the SuggestionController; the display layer only reads it.
    """

    buffer: str = ""
    cursor: int = 0
    state: SessionState = SessionState.IDLE
    suggestion: Suggestion | None = None
    overlay: Overlay = field(default=EMPTY_OVERLAY)
    status: str = ""

    @property
    def requesting(self) -> bool:
        return self.state is SessionState.REQUESTING

    def set_buffer(self, text: str, cursor: int | None = None) -> None:
        """Record the editor's buffer and cursor."""
        self.buffer = text
        self.cursor = len(text) if cursor is None else max(0, min(cursor, len(text)))

    def clear_suggestion(self) -> None:
        """Drop the active suggestion and its overlay."""
        self.suggestion = None
        self.overlay = EMPTY_OVERLAY
