"""Command-line interface for aicmd."""

from __future__ import annotations

import argparse
import asyncio
import os
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

from aicmd import __version__

if TYPE_CHECKING:
    from aicmd.config.schema import Config

console = Console(stderr=True)

_EXIT_WORDS = frozenset({"exit", "quit", "logout"})


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="aicmd",
        description="AI command suggestions for the command line",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Write debug logging to the debug log file",
    )
    parser.add_argument(
        "--provider",
        help="Provider to use (anthropic, openai, gemini, deepseek, ollama)",
    )
    parser.add_argument(
        "--model",
        help="Model for the selected provider",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Additional config file (highest file priority)",
    )

    subparsers = parser.add_subparsers(dest="mode", help="Operating mode")

    subparsers.add_parser(
        "shell",
        help="Interactive prompt that runs each line with $SHELL (default)",
    )

    edit_parser = subparsers.add_parser(
        "edit",
        help="Edit one line with suggestions and print it",
    )
    edit_parser.add_argument(
        "--initial",
        default="",
        help="Initial buffer contents",
    )

    suggest_parser = subparsers.add_parser(
        "suggest",
        help="Print one suggestion for TEXT and exit",
    )
    suggest_parser.add_argument(
        "text",
        nargs="+",
        help="Description of the command you want",
    )

    return parser


def apply_overrides(config: Config, parsed: argparse.Namespace) -> Config:
    """Apply command-line options on top of the loaded config."""
    if parsed.provider:
        config.llm.provider = parsed.provider
    if parsed.model:
        config.llm.models[config.llm.provider.strip().lower()] = parsed.model
    if parsed.verbose:
        config.logging.debug = True
    return config


def _shell_path() -> str:
    return os.environ.get("SHELL") or "/bin/sh"


def _cd_target(line: str) -> str | None:
    """Directory for a plain `cd [DIR]` line, else None."""
    try:
        words = shlex.split(line)
    except ValueError:
        return None
    if not words or words[0] != "cd" or len(words) > 2:
        return None
    return words[1] if len(words) == 2 else "~"


async def run_line(line: str) -> int:
    """Run one command line with the user's shell, sharing our terminal.

    ``cd`` is handled in-process so the working directory persists.
    """
    target = _cd_target(line)
    if target is not None:
        try:
            os.chdir(os.path.expanduser(target))
        except OSError as e:
            console.print(f"cd: {e.strerror}: {target}", markup=False, highlight=False)
            return 1
        return 0

    try:
        process = await asyncio.create_subprocess_exec(_shell_path(), "-c", line)
    except OSError as e:
        console.print(f"aicmd: cannot run {_shell_path()}: {e}", markup=False, highlight=False)
        return 127
    return await process.wait()


async def run_shell(config: Config) -> int:
    """Read lines with suggestions and run them until EOF or exit."""
    from aicmd.core.controller import SuggestionController
    from aicmd.shell.prompt import SuggestionPrompt

    controller = SuggestionController.from_config(config)
    prompt = SuggestionPrompt.from_config(controller, config)
    status = 0
    while True:
        try:
            line = await prompt.read_line()
        except KeyboardInterrupt:
            continue
        except EOFError:
            break
        line = line.strip()
        if not line:
            continue
        if line in _EXIT_WORDS:
            break
        status = await run_line(line)
    return status


async def run_edit(config: Config, initial: str) -> int:
    """Edit one line and print the result to stdout."""
    from aicmd.core.controller import SuggestionController
    from aicmd.shell.prompt import SuggestionPrompt

    controller = SuggestionController.from_config(config)
    prompt = SuggestionPrompt.from_config(controller, config)
    try:
        line = await prompt.read_line(default=initial)
    except (KeyboardInterrupt, EOFError):
        return 130
    sys.stdout.write(line + "\n")
    return 0


async def run_suggest(config: Config, text: str) -> int:
    """Print one sanitized suggestion for ``text``."""
    from aicmd.core.sanitize import sanitize
    from aicmd.errors import AICmdError, CredentialError, EmptyResponseError
    from aicmd.llm.dispatcher import RequestDispatcher

    try:
        dispatcher = RequestDispatcher.from_config(config.llm)
        suggestion = sanitize(await dispatcher.dispatch(text))
        if not suggestion:
            raise EmptyResponseError("no suggestion")
    except CredentialError as e:
        console.print(e.status_message(), style="red", markup=False, highlight=False)
        if e.remediation:
            console.print(e.remediation, style="yellow", markup=False, highlight=False)
        return 1
    except AICmdError as e:
        console.print(e.status_message(), style="red", markup=False, highlight=False)
        return 1

    sys.stdout.write(suggestion + "\n")
    return 0


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    from aicmd.config import load_config
    from aicmd.errors import ConfigurationError
    from aicmd.logging import setup_logging

    config = apply_overrides(load_config(config_file=parsed.config), parsed)
    setup_logging(config.logging)

    mode = parsed.mode or "shell"
    try:
        if mode == "suggest":
            return asyncio.run(run_suggest(config, " ".join(parsed.text)))
        if mode == "edit":
            return asyncio.run(run_edit(config, parsed.initial))
        return asyncio.run(run_shell(config))
    except ConfigurationError as e:
        # Invalid trigger key
        console.print(e.status_message(), style="red", markup=False, highlight=False)
        return 2
