"""Exceptions and exit codes for bump-check.

Every failure the check can hit maps onto one of these classes. Each carries
the completion status the process should exit with so the CLI can report it
without knowing which step failed.
"""

from __future__ import annotations

from enum import IntEnum
from typing import ClassVar


class ExitCode(IntEnum):
    """Completion status of a check run.

    CI merge gating only distinguishes zero from non-zero, so both a needed
    bump and a fatal error map onto 1.
    """

    SUCCESS = 0
    FAILURE = 1


class BumpCheckError(Exception):
    """Base exception for bump-check errors."""

    _default_exit_code: ClassVar[ExitCode] = ExitCode.FAILURE

    def __init__(self, message: str, exit_code: ExitCode | None = None) -> None:
        super().__init__(message)
        self._exit_code = exit_code

    @property
    def exit_code(self) -> ExitCode:
        """Get the exit code for this exception."""
        if self._exit_code is not None:
            return self._exit_code
        return self.__class__._default_exit_code


class ResolutionError(BumpCheckError):
    """A commit or pull-request reference could not be resolved.

    Raised when:
    - git cannot resolve a base or head reference to a commit
    - the diff between two resolved commits fails
    - the review system cannot list the files of a pull request
    """


class RegistryQueryError(BumpCheckError):
    """The package registry was unreachable or answered with garbage.

    Never downgraded to "no bump needed": a member whose published version is
    unknown cannot be judged.
    """

    def __init__(self, message: str, package: str | None = None) -> None:
        super().__init__(message)
        self.package = package


class ManifestError(BumpCheckError):
    """A member manifest is unreadable or declares an invalid version."""


class CommentPostError(BumpCheckError):
    """Posting the report to the review request failed.

    Non-fatal: the report is still printed and the verdicts still decide the
    exit status.
    """
