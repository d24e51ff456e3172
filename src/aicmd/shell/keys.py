"""Key bindings for the suggestion lifecycle.

Bindings:
- trigger (default Ctrl-Z): request a suggestion for the current buffer
- Tab: accept the suggestion, otherwise normal completion
- Right: accept the suggestion, otherwise the next handler in the chain
- Enter: clear suggestion state, then submit the line
- Escape: dismiss the suggestion
- any other key while a request is pending: cancel it; the key is consumed
  (the trigger itself is ignored then)
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from prompt_toolkit.document import Document
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.bindings.named_commands import get_by_name
from prompt_toolkit.keys import ALL_KEYS, Keys

from aicmd.config.schema import DEFAULT_TRIGGER_KEY
from aicmd.errors import ConfigurationError
from aicmd.logging import get_logger

if TYPE_CHECKING:
    from prompt_toolkit.buffer import Buffer
    from prompt_toolkit.key_binding import KeyPressEvent

    from aicmd.core.controller import SuggestionController

log = get_logger("keys")

KeyHandler = Callable[["KeyPressEvent"], Any]

# Keys the terminal layer needs even while a request is pending
_PASSTHROUGH_KEYS = frozenset(
    {
        Keys.CPRResponse.value,
        Keys.Vt100MouseEvent.value,
        Keys.WindowsMouseEvent.value,
        Keys.Ignore.value,
        Keys.Any.value,
    }
)

_CARET_RE = re.compile(r"^\^(.)$")
_CARET_NAMES = {"[": "escape", "?": "c-h", " ": "c-space", "@": "c-@", "i": "tab", "m": "enter"}


def parse_key(spec: str) -> str:
    """Normalize a key name to prompt_toolkit notation.

    Accepts prompt_toolkit names ("c-z", "f5", "escape") and the caret
    notation used by zsh bindkey ("^z", "^Z", "^[").

    Raises:
        ConfigurationError: The name is not a known key.
    """
    text = spec.strip()
    match = _CARET_RE.match(text)
    if match:
        char = match.group(1).lower()
        if char in _CARET_NAMES:
            return _CARET_NAMES[char]
        if char.isalpha() or char in "\\]^_":
            return f"c-{char}"
        raise ConfigurationError(f"unsupported key '{spec}'")

    name = text.lower()
    if name in ALL_KEYS:
        return name
    if len(text) == 1 and text.isprintable():
        return text
    raise ConfigurationError(f"unknown key '{spec}'")


def apply_text(buffer: Buffer, text: str) -> None:
    """Replace the buffer contents and put the cursor at the end."""
    buffer.document = Document(text, cursor_position=len(text))


class ForwardCharChain:
    """Right-arrow handler with explicit delegation.

    Accepts the displayed suggestion if there is one; otherwise calls the
    handler that was bound before this one, and falls back to moving the
    cursor one character right.
    """

    def __init__(
        self,
        controller: SuggestionController,
        next_handler: KeyHandler | None = None,
    ) -> None:
        self.controller = controller
        self.next_handler = next_handler

    def __call__(self, event: KeyPressEvent) -> None:
        text = self.controller.accept()
        if text is not None:
            apply_text(event.current_buffer, text)
            return
        if self.next_handler is not None:
            self.next_handler(event)
            return
        get_by_name("forward-char").call(event)


def build_key_bindings(
    controller: SuggestionController,
    *,
    trigger: str = DEFAULT_TRIGGER_KEY,
    request: Callable[[], Awaitable[Any]] | None = None,
    next_forward_char: KeyHandler | None = None,
) -> KeyBindings:
    """Create the suggestion key bindings.

    Args:
        controller: Controller for the session.
        trigger: Key that requests a suggestion.
        request: Coroutine function run in the background on trigger.
            Defaults to ``controller.suggest``.
        next_forward_char: Handler the Right arrow delegates to when no
            suggestion is displayed.

    Raises:
        ConfigurationError: ``trigger`` is not a known key.
    """
    kb = KeyBindings()
    trigger_key = parse_key(trigger)
    run_request = request or controller.suggest

    requesting = Condition(lambda: controller.session.requesting)
    displaying = Condition(lambda: controller.has_suggestion)

    # While a request is pending every other key cancels it and goes no further
    def _cancel(event: KeyPressEvent) -> None:
        log.debug("key %r cancels request", event.key_sequence[0].key)
        controller.cancel()

    for key in [Keys.Any.value, *sorted(set(ALL_KEYS) - _PASSTHROUGH_KEYS - {trigger_key})]:
        kb.add(key, filter=requesting, eager=True)(_cancel)

    @kb.add(trigger_key, filter=requesting, eager=True)
    def _ignore_trigger(event: KeyPressEvent) -> None:
        log.debug("trigger ignored: request in flight")

    @kb.add(trigger_key, filter=~requesting, eager=True)
    def _trigger(event: KeyPressEvent) -> None:
        buffer = event.current_buffer
        controller.on_edit(buffer.text, buffer.cursor_position)
        event.app.create_background_task(run_request())

    @kb.add("tab", filter=displaying & ~requesting)
    def _accept_tab(event: KeyPressEvent) -> None:
        text = controller.accept()
        if text is not None:
            apply_text(event.current_buffer, text)

    kb.add("right", filter=~requesting)(ForwardCharChain(controller, next_forward_char))

    @kb.add("enter", filter=~requesting)
    def _submit(event: KeyPressEvent) -> None:
        controller.line_finish()
        event.current_buffer.validate_and_handle()

    # Not eager: escape also starts Meta sequences such as Alt-f
    @kb.add("escape", filter=displaying & ~requesting)
    def _dismiss(event: KeyPressEvent) -> None:
        controller.dismiss()

    return kb
