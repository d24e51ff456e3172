"""System prompt and request input preparation."""

from __future__ import annotations

import os
import platform
from functools import lru_cache
from pathlib import Path

SYSTEM_PROMPT = (
    "You are a shell command generator. Translate the user's request into a "
    "single command line for their shell. Output only the command itself: no "
    "explanation, no markdown, no code fences, no surrounding quotes, no "
    "leading prompt character. Chain multiple steps with && or pipes on one "
    "line. If the request is already a command, return it corrected or "
    "completed."
)

CONTEXT_TEMPLATE = "Context:\n- OS: {os}\n- Shell: {shell}\n- Working directory: {cwd}"


@lru_cache(maxsize=1)
def detect_os() -> str:
    """Describe the operating system, e.g. "macOS 15.1" or "Linux"."""
    system = platform.system()
    if system == "Darwin":
        version = platform.mac_ver()[0]
        return f"macOS {version or 'unknown'}"
    return system or "unknown"


def detect_shell() -> str:
    """Name of the user's shell, from $SHELL."""
    shell = os.environ.get("SHELL", "")
    return Path(shell).name if shell else "sh"


def build_system_prompt(cwd: str | None = None) -> str:
    """Fixed instructions followed by the environment context.

    Args:
        cwd: Working directory to report. Defaults to the current directory.
    """
    context = CONTEXT_TEMPLATE.format(
        os=detect_os(),
        shell=detect_shell(),
        cwd=cwd or os.getcwd(),
    )
    return f"{SYSTEM_PROMPT}\n{context}"


def prepare_input(text: str) -> str:
    """Turn a possibly multi-line buffer into one request line.

    Embedded newlines become "; " statement separators.
    """
    lines = [line.strip() for line in text.replace("\r\n", "\n").split("\n")]
    return "; ".join(line for line in lines if line)
