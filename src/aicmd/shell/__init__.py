"""prompt_toolkit integration: ghost text, key bindings and the line editor."""

from aicmd.shell.completion import CommandLineCompleter
from aicmd.shell.display import DEFAULT_STYLE, GhostTextProcessor, overlay_fragments
from aicmd.shell.keys import ForwardCharChain, apply_text, build_key_bindings, parse_key
from aicmd.shell.prompt import SuggestionPrompt

__all__ = [
    "CommandLineCompleter",
    "DEFAULT_STYLE",
    "ForwardCharChain",
    "GhostTextProcessor",
    "SuggestionPrompt",
    "apply_text",
    "build_key_bindings",
    "overlay_fragments",
    "parse_key",
]
