"""Sanitization of model output before it is shown on the command line.

Model output is untrusted. It is displayed inside the line editor and may be
copied into the input buffer, so anything that could move the cursor,
change colors, inject a newline (and with it an implicit submit) or
otherwise take over the terminal is removed.

Passes, in order:
1. CSI escape sequences: ESC [ params letter. Applied until none remain,
   since removing one sequence can join the pieces of another.
2. Any leftover ESC characters (non-CSI escapes, malformed sequences).
3. Control characters 0x00-0x1F except tab, and DEL 0x7F. Newlines included.
4. Leading and trailing whitespace.
"""

from __future__ import annotations

import re

ESC = "\x1b"

# ESC [ params letter
_CSI_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

# 0x00-0x08, 0x0a-0x1f, 0x7f (tab 0x09 is kept)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


def strip_csi(text: str) -> str:
    """Remove CSI sequences until none remain."""
    while True:
        stripped = _CSI_RE.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def strip_control(text: str) -> str:
    """Remove stray ESC characters and disallowed control characters."""
    return _CONTROL_RE.sub("", text.replace(ESC, ""))


def sanitize(raw: str | None) -> str:
    """Turn raw provider text into a safe, single-line display string.

    Total function: never raises. ``None`` yields the empty string.

    Args:
        raw: Text as received from the provider.

    Returns:
        The sanitized text. ``sanitize(sanitize(x)) == sanitize(x)``.

    Example:
        >>> sanitize("\\x1b[31mls -la\\x1b[0m\\n")
        'ls -la'
    """
    if not raw:
        return ""
    if not isinstance(raw, str):
        raw = str(raw)

    text = strip_csi(raw)
    text = strip_control(text)
    return text.strip()
