"""CLI entry point for aicmd.

Usage:
    aicmd                       # interactive shell with suggestions
    aicmd edit --initial "..."  # edit one line, print it
    aicmd suggest list big files
    python -m aicmd
"""

import sys


def main() -> int:
    """Main entry point for the aicmd CLI."""
    from aicmd.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
