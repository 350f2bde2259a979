"""Shell, git and gh utilities.

Provides simple wrappers around subprocess calls for running git and the
GitHub CLI, plus output formatting helpers shared by every step of the check.
"""

from __future__ import annotations

import subprocess
import sys


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "rev-parse", "HEAD").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(
        ["git", *args], capture_output=True, text=True, encoding="utf-8", check=check
    )
    return result.stdout.strip()


def gh(*args: str, check: bool = True, input: str | None = None) -> str:
    """Run a GitHub CLI command and return stdout.

    Relies on the session `gh` is already authenticated with (GH_TOKEN in CI).

    Args:
        *args: Arguments to pass to gh (e.g., "pr", "view", "123").
        check: If True (default), raise on non-zero exit.
        input: Optional text fed to the command's stdin.
    """
    result = subprocess.run(
        ["gh", *args],
        capture_output=True,
        text=True,
        encoding="utf-8",
        check=check,
        input=input,
    )
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of the check in CI logs.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print a non-fatal warning to stderr."""
    print(f"WARNING: {msg}", file=sys.stderr)

