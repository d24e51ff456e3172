"""Interactive line editor with AI suggestions."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.application import run_in_terminal
from prompt_toolkit.history import FileHistory, InMemoryHistory
from rich.console import Console

from aicmd.core.session import RequestOutcome
from aicmd.errors import CredentialError
from aicmd.logging import get_logger
from aicmd.shell.completion import CommandLineCompleter
from aicmd.shell.display import DEFAULT_STYLE, GhostTextProcessor
from aicmd.shell.keys import build_key_bindings

if TYPE_CHECKING:
    from prompt_toolkit.buffer import Buffer
    from prompt_toolkit.formatted_text import StyleAndTextTuples

    from aicmd.config.schema import Config
    from aicmd.core.controller import SuggestionController
    from aicmd.core.session import Session
    from aicmd.shell.keys import KeyHandler

log = get_logger("prompt")

_stderr_console = Console(stderr=True)


class SuggestionPrompt:
    """A prompt_toolkit PromptSession wired to a SuggestionController.

    Buffer edits are forwarded to the controller, the controller's overlay
    is drawn as ghost text and its status message shows in the bottom
    toolbar.
    """

    def __init__(
        self,
        controller: SuggestionController,
        *,
        trigger: str | None = None,
        message: str = "❯ ",
        history_file: str | None = None,
        next_forward_char: KeyHandler | None = None,
        console: Console | None = None,
    ) -> None:
        """Initialize the prompt.

        Args:
            controller: Controller driving the suggestion lifecycle.
            trigger: Trigger key. Defaults to the built-in default.
            message: Prompt text.
            history_file: File to persist line history in.
            next_forward_char: Right-arrow handler used when no suggestion
                is shown.
            console: Console for remediation output.

        Raises:
            ConfigurationError: The trigger key is not a known key.
        """
        self.controller = controller
        self.message = message
        self.console = console if console is not None else _stderr_console
        controller.on_update = self._on_update

        kwargs = {"trigger": trigger} if trigger else {}
        key_bindings = build_key_bindings(
            controller,
            request=self.request_suggestion,
            next_forward_char=next_forward_char,
            **kwargs,
        )

        history = (
            FileHistory(os.path.expanduser(history_file)) if history_file else InMemoryHistory()
        )
        self.session: PromptSession[str] = PromptSession(
            history=history,
            completer=CommandLineCompleter(),
            complete_while_typing=False,
            key_bindings=key_bindings,
            input_processors=[GhostTextProcessor(lambda: self.controller.session)],
            bottom_toolbar=self._toolbar,
            style=DEFAULT_STYLE,
        )
        self.session.default_buffer.on_text_changed += self._on_text_changed

    @classmethod
    def from_config(cls, controller: SuggestionController, config: Config) -> SuggestionPrompt:
        return cls(
            controller,
            trigger=config.keys.trigger,
            message=config.shell.prompt,
            history_file=config.shell.history_file,
        )

    async def read_line(self, default: str = "") -> str:
        """Read one line, with suggestions available while editing.

        Raises:
            EOFError: Ctrl-D on an empty line.
            KeyboardInterrupt: Ctrl-C.
        """
        self.controller.reset()
        try:
            return await self.session.prompt_async(self.message, default=default)
        finally:
            self.controller.line_finish()

    async def request_suggestion(self) -> RequestOutcome:
        """Run one request and report credential problems above the prompt."""
        outcome = await self.controller.suggest()
        error = self.controller.last_error
        if (
            outcome is RequestOutcome.FAILED
            and isinstance(error, CredentialError)
            and error.remediation
        ):
            await run_in_terminal(lambda: self.print_remediation(error))
        return outcome

    def print_remediation(self, error: CredentialError) -> None:
        self.console.print(error.remediation, style="yellow", markup=False, highlight=False)

    def _on_text_changed(self, buffer: Buffer) -> None:
        self.controller.on_edit(buffer.text, buffer.cursor_position)

    def _on_update(self, session: Session) -> None:
        app = self.session.app
        if app.is_running:
            app.invalidate()

    def _toolbar(self) -> StyleAndTextTuples:
        status = self.controller.session.status
        return [("class:aicmd.status", status)] if status else []
