"""Suggestion controller: the per-session state machine.

    IDLE --trigger--> REQUESTING --success--> DISPLAYING --accept/dismiss/
      ^                  |  cancel/failure        |      diverge/line end
      |                  v                        v
      +--------------- IDLE <---------------------+

The controller owns the Session. The interactive layer forwards key events
and buffer edits to it and redraws from ``session`` whenever the update
callback fires. The input buffer changes only through :meth:`accept`; every
other transition leaves it alone.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from aicmd.core.overlay import EMPTY_OVERLAY, render_overlay, render_progress, synchronize
from aicmd.core.sanitize import sanitize
from aicmd.core.session import (
    RequestOutcome,
    Resolution,
    Session,
    SessionState,
    Suggestion,
)
from aicmd.core.supervisor import Cancelled, CallSupervisor, DispatchFn, Done, Failed, Pending
from aicmd.errors import AICmdError, ConfigurationError, EmptyResponseError
from aicmd.logging import get_logger

if TYPE_CHECKING:
    from aicmd.config.schema import Config
    from aicmd.llm.credentials import CredentialResolver

log = get_logger("controller")

DEFAULT_POLL_INTERVAL = 0.1

UpdateCallback = Callable[[Session], None]


class SuggestionController:
    """Drives one session through request, display and resolution.

    Usage:
        controller = SuggestionController(dispatcher.dispatch)
        controller.on_edit("list big files")
        outcome = await controller.suggest()
        if outcome is RequestOutcome.SUCCEEDED:
            new_buffer = controller.accept()
    """

    def __init__(
        self,
        dispatch: DispatchFn | None,
        *,
        config_error: ConfigurationError | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_update: UpdateCallback | None = None,
        session: Session | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            dispatch: Coroutine function returning raw suggestion text.
                May be None only together with ``config_error``.
            config_error: Configuration failure found at startup. Every
                trigger fails with it without contacting a provider.
            poll_interval: Seconds between progress updates while waiting.
            on_update: Called with the session after every visible change.
            session: Session to drive. A fresh one by default.
        """
        if dispatch is None and config_error is None:
            raise ValueError("dispatch is required unless config_error is given")
        self.session = session or Session()
        self.config_error = config_error
        self.poll_interval = poll_interval
        self.last_error: AICmdError | None = None
        self.on_update = on_update
        self._supervisor = CallSupervisor(dispatch) if dispatch is not None else None

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        credentials: CredentialResolver | None = None,
        on_update: UpdateCallback | None = None,
    ) -> SuggestionController:
        """Build a controller with a dispatcher for the configured provider.

        An invalid provider does not raise here: the error is kept and
        reported on every trigger.
        """
        from aicmd.llm.dispatcher import RequestDispatcher

        try:
            dispatcher = RequestDispatcher.from_config(config.llm, credentials=credentials)
        except ConfigurationError as e:
            log.warning("provider configuration invalid: %s", e)
            return cls(
                None,
                config_error=e,
                poll_interval=config.shell.poll_interval,
                on_update=on_update,
            )
        return cls(
            dispatcher.dispatch,
            poll_interval=config.shell.poll_interval,
            on_update=on_update,
        )

    # -- properties -------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def supervisor(self) -> CallSupervisor | None:
        return self._supervisor

    @property
    def has_suggestion(self) -> bool:
        return self.session.state is SessionState.DISPLAYING and self.session.suggestion is not None

    # -- request lifecycle ------------------------------------------------

    async def suggest(self) -> RequestOutcome:
        """Request a suggestion for the current buffer.

        Returns once the request has succeeded, failed or been cancelled.
        While it runs the overlay shows a progress spinner.

        Returns:
            IGNORED if the buffer is empty or a request is already running;
            otherwise how the request ended.
        """
        session = self.session
        if session.state is SessionState.REQUESTING:
            log.debug("trigger ignored: request in flight")
            return RequestOutcome.IGNORED
        if not session.buffer:
            log.debug("trigger ignored: empty buffer")
            return RequestOutcome.IGNORED

        if session.state is SessionState.DISPLAYING:
            log.debug("discarding suggestion %r for new request", session.suggestion)
            session.clear_suggestion()
            session.state = SessionState.IDLE

        session.status = ""
        self.last_error = None

        if self.config_error is not None:
            return self._fail(self.config_error)

        assert self._supervisor is not None
        buffer = session.buffer
        call = self._supervisor.begin(buffer)
        self._transition(SessionState.REQUESTING)

        tick = 0
        while True:
            session.overlay = render_progress(session.buffer, tick)
            self._notify()
            result = await self._supervisor.wait(call, self.poll_interval)
            if isinstance(result, Pending):
                tick += 1
                continue
            if isinstance(result, Cancelled):
                log.debug("request cancelled: %r", buffer)
                return RequestOutcome.CANCELLED
            if isinstance(result, Failed):
                return self._fail(result.error)
            assert isinstance(result, Done)
            return self._succeed(result.text, buffer)

    def cancel(self) -> bool:
        """Abort the pending request, leaving buffer and cursor unchanged.

        Returns:
            True if a request was cancelled.
        """
        if self.session.state is not SessionState.REQUESTING:
            return False
        if self._supervisor is not None:
            self._supervisor.cancel()
        self.session.overlay = EMPTY_OVERLAY
        self._transition(SessionState.IDLE)
        self._notify()
        return True

    def _succeed(self, raw: str, requested_for: str) -> RequestOutcome:
        session = self.session
        text = sanitize(raw)
        if not text:
            return self._fail(EmptyResponseError("no suggestion"))
        session.suggestion = Suggestion(raw=raw, text=text, requested_for=requested_for)
        session.overlay = render_overlay(session.buffer, text)
        log.debug(
            "suggestion: buffer=%r suggestion=%r overlay=%r",
            session.buffer,
            text,
            session.overlay.text,
        )
        self._transition(SessionState.DISPLAYING)
        self._notify()
        return RequestOutcome.SUCCEEDED

    def _fail(self, error: AICmdError) -> RequestOutcome:
        session = self.session
        self.last_error = error
        session.clear_suggestion()
        session.status = error.status_message()
        log.debug("request failed: %s: %s", type(error).__name__, error)
        self._transition(SessionState.IDLE)
        self._notify()
        return RequestOutcome.FAILED

    # -- display lifecycle ------------------------------------------------

    def on_edit(self, text: str, cursor: int | None = None) -> Resolution | None:
        """Record a buffer change made by the user.

        While a suggestion is displayed the change is run through the edit
        synchronizer: the overlay narrows while the buffer is still a prefix
        of the suggestion and is cleared otherwise.

        Returns:
            DIVERGED if the suggestion was discarded, else None.
        """
        session = self.session
        changed = text != session.buffer
        session.set_buffer(text, cursor)
        if not changed:
            return None
        if session.status:
            session.status = ""

        if session.state is not SessionState.DISPLAYING:
            return None

        suggestion, overlay = synchronize(text, session.suggestion)
        if suggestion is None:
            log.debug("diverged: buffer=%r", text)
            return self._resolve(Resolution.DIVERGED)
        session.overlay = overlay
        log.debug("narrowed: buffer=%r overlay=%r", text, overlay.text)
        self._notify()
        return None

    def accept(self) -> str | None:
        """Copy the suggestion into the buffer.

        Returns:
            The new buffer text, or None if no suggestion is displayed.
        """
        session = self.session
        if not self.has_suggestion:
            return None
        assert session.suggestion is not None
        text = session.suggestion.text
        session.set_buffer(text)
        self._resolve(Resolution.ACCEPTED)
        return text

    def dismiss(self) -> bool:
        """Discard the displayed suggestion without touching the buffer."""
        if not self.has_suggestion:
            return False
        self._resolve(Resolution.REJECTED)
        return True

    def line_finish(self) -> Resolution | None:
        """Clear all suggestion state before the line is submitted.

        A pending request is cancelled. The buffer is left as is.

        Returns:
            LINE_ENDED if a suggestion was displayed, else None.
        """
        if self.session.state is SessionState.REQUESTING:
            self.cancel()
            return None
        if self.has_suggestion:
            return self._resolve(Resolution.LINE_ENDED)
        self.session.overlay = EMPTY_OVERLAY
        return None

    def reset(self) -> None:
        """Start a new line: cancel anything pending and empty the buffer."""
        self.cancel()
        self.session.clear_suggestion()
        self.session.state = SessionState.IDLE
        self.session.status = ""
        self.session.set_buffer("")

    def _resolve(self, resolution: Resolution) -> Resolution:
        log.debug("resolved: %s buffer=%r", resolution.value, self.session.buffer)
        self.session.clear_suggestion()
        self._transition(SessionState.IDLE)
        self._notify()
        return resolution

    # -- helpers ----------------------------------------------------------

    def _transition(self, state: SessionState) -> None:
        if self.session.state is not state:
            log.debug("state: %s -> %s", self.session.state.value, state.value)
        self.session.state = state

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self.session)
