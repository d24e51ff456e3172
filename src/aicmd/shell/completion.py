"""Tab completion for command lines.

Tab only accepts a suggestion while one is displayed; otherwise it falls
through to prompt_toolkit's menu completion, which uses this completer.
"""

from __future__ import annotations

from collections.abc import Iterable

from prompt_toolkit.completion import (
    CompleteEvent,
    Completer,
    Completion,
    ExecutableCompleter,
    PathCompleter,
)
from prompt_toolkit.document import Document


class CommandLineCompleter(Completer):
    """Complete executables in the command position and paths after it.

    Only the word under the cursor is completed, so earlier arguments never
    affect the candidates.
    """

    def __init__(self) -> None:
        self._commands = ExecutableCompleter()
        self._paths = PathCompleter(expanduser=True)

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        head, sep, word = text.rpartition(" ")
        completer = self._paths if sep and head.strip() else self._commands
        yield from completer.get_completions(Document(word, len(word)), complete_event)
