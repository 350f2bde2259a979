"""Hosted review system client.

`GitHubReview` talks to GitHub through the `gh` CLI, so it inherits whatever
session gh is authenticated with (GH_TOKEN in CI). Anything with the same
two methods can stand in for it, which is how tests inject fakes.
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Callable
from typing import Protocol

from .errors import CommentPostError, ResolutionError
from .shell import gh as run_gh


class ReviewClient(Protocol):
    def list_files(self, pull_request: str) -> list[str]: ...

    def post_comment(self, pull_request: str, body: str) -> None: ...


class GitHubReview:
    """Review client backed by `gh pr`.

    Args:
        repo: Optional OWNER/REPO; defaults to the repository of the current
              directory.
        gh: Callable running gh and returning stdout.
    """

    def __init__(
        self, repo: str | None = None, gh: Callable[..., str] = run_gh
    ) -> None:
        self.repo = repo
        self._gh = gh

    def _repo_args(self) -> list[str]:
        return ["--repo", self.repo] if self.repo else []

    def list_files(self, pull_request: str) -> list[str]:
        """Return the paths touched by a pull request.

        Raises:
            ResolutionError: If the request cannot be found or gh fails.
        """
        try:
            output = self._gh(
                "pr", "view", pull_request, "--json", "files", *self._repo_args()
            )
        except subprocess.CalledProcessError as exc:
            raise ResolutionError(
                f"Cannot list files of pull request {pull_request}: "
                f"{(exc.stderr or '').strip() or exc}"
            ) from exc
        except OSError as exc:
            raise ResolutionError(f"Cannot run gh: {exc}") from exc

        try:
            data = json.loads(output)
            return [f["path"] for f in data.get("files") or []]
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError) as exc:
            raise ResolutionError(
                f"Unexpected file list for pull request {pull_request}"
            ) from exc

    def post_comment(self, pull_request: str, body: str) -> None:
        """Post body as a comment on the pull request.

        The body is fed through stdin so markdown survives untouched.

        Raises:
            CommentPostError: If gh fails.
        """
        try:
            self._gh(
                "pr",
                "comment",
                pull_request,
                "--body-file",
                "-",
                *self._repo_args(),
                input=body,
            )
        except (subprocess.CalledProcessError, OSError) as exc:
            raise CommentPostError(
                f"Cannot comment on pull request {pull_request}: {exc}"
            ) from exc
