"""Suggestion lifecycle: sanitizing, supervising, rendering and resolving."""

from aicmd.core.controller import SuggestionController
from aicmd.core.overlay import (
    EMPTY_OVERLAY,
    GHOST_STYLE,
    REPLACEMENT_SEPARATOR,
    Highlight,
    Overlay,
    OverlayMode,
    render_overlay,
    render_progress,
    synchronize,
)
from aicmd.core.sanitize import sanitize
from aicmd.core.session import (
    RequestOutcome,
    Resolution,
    Session,
    SessionState,
    Suggestion,
)
from aicmd.core.supervisor import (
    CallSupervisor,
    Cancelled,
    Done,
    Failed,
    Pending,
    PendingCall,
    PollResult,
)

__all__ = [
    # Controller
    "SuggestionController",
    # Session model
    "Session",
    "SessionState",
    "Suggestion",
    "RequestOutcome",
    "Resolution",
    # Supervisor
    "CallSupervisor",
    "PendingCall",
    "PollResult",
    "Pending",
    "Done",
    "Failed",
    "Cancelled",
    # Overlay
    "Overlay",
    "OverlayMode",
    "Highlight",
    "EMPTY_OVERLAY",
    "GHOST_STYLE",
    "REPLACEMENT_SEPARATOR",
    "render_overlay",
    "render_progress",
    "synchronize",
    # Sanitizer
    "sanitize",
]
