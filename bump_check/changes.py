"""Change-set extraction: which workspace members does a change touch?

A member is the first directory below one of the configured root prefixes,
so `crates/foo/src/lib.rs` belongs to `crates/foo`. Files sitting directly
in a prefix directory and files outside every prefix belong to no member.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Iterable

from .config import CheckConfig
from .errors import ResolutionError
from .models import ChangeSet
from .review import ReviewClient
from .shell import git as run_git
from .shell import step


def member_paths(paths: Iterable[str], prefixes: Iterable[str]) -> tuple[str, ...]:
    """Map changed file paths to the member directories they live in.

    Examples:
        member_paths(["crates/foo/src/lib.rs", "README.md"], ["crates"])
            → ("crates/foo",)
        member_paths(["crates/Cargo.toml"], ["crates"]) → ()
    """
    roots = {p.strip("/") for p in prefixes}
    members: set[str] = set()
    for path in paths:
        parts = path.strip().split("/")
        # Need <prefix>/<member>/<something>
        if len(parts) >= 3 and parts[0] in roots and parts[1]:
            members.add(f"{parts[0]}/{parts[1]}")
    return tuple(sorted(members))


def _dedupe(paths: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for path in paths:
        path = path.strip()
        if path:
            seen.setdefault(path, None)
    return tuple(seen)


class ChangeSetExtractor:
    """Produce the ChangeSet for a run.

    Args:
        config: Run configuration with base/head already resolved.
        review: Review-system client, needed only for pull-request runs.
        git: Callable running git and returning stdout; raises
             CalledProcessError on failure.
    """

    def __init__(
        self,
        config: CheckConfig,
        review: ReviewClient | None = None,
        git: Callable[..., str] = run_git,
    ) -> None:
        self.config = config
        self.review = review
        self._git = git

    def extract(self) -> ChangeSet:
        """Use the review request's file list when one is configured, else git."""
        if self.config.pull_request:
            return self.from_pull_request(self.config.pull_request)
        return self.from_commits()

    def resolve(self, ref: str) -> str:
        """Resolve a reference to a full commit SHA.

        Raises:
            ResolutionError: If git cannot resolve the reference.
        """
        try:
            sha = self._git(
                "-C",
                str(self.config.root),
                "rev-parse",
                "--verify",
                "--quiet",
                f"{ref}^{{commit}}",
            )
        except (subprocess.CalledProcessError, OSError) as exc:
            raise ResolutionError(f"Cannot resolve commit reference {ref!r}") from exc
        if not sha:
            raise ResolutionError(f"Cannot resolve commit reference {ref!r}")
        return sha

    def from_commits(self) -> ChangeSet:
        """Diff base against head, limited to the root prefixes."""
        step("Collecting changed members from git")

        if not self.config.base or not self.config.head:
            raise ResolutionError("Both base and head commits must be set")
        base = self.resolve(self.config.base)
        head = self.resolve(self.config.head)
        print(f"  base: {base}")
        print(f"  head: {head}")

        pathspecs = [f"{p.strip('/')}/" for p in self.config.root_prefixes]
        try:
            output = self._git(
                "-C",
                str(self.config.root),
                "diff",
                "--name-only",
                "-z",
                base,
                head,
                "--",
                *pathspecs,
            )
        except (subprocess.CalledProcessError, OSError) as exc:
            raise ResolutionError(f"git diff {base}..{head} failed") from exc

        # NUL-separated output keeps non-ASCII paths unquoted
        return self._change_set(output.split("\0"), head=head)

    def from_pull_request(self, pull_request: str) -> ChangeSet:
        """Ask the review system which files the request touches."""
        step(f"Collecting changed members from pull request {pull_request}")

        if self.review is None:
            raise ResolutionError("No review client configured for pull request runs")
        return self._change_set(self.review.list_files(pull_request))

    def _change_set(
        self, paths: Iterable[str], head: str | None = None
    ) -> ChangeSet:
        files = _dedupe(paths)
        members = member_paths(files, self.config.root_prefixes)
        for member in members:
            print(f"  {member}")
        if not members:
            print("  <none>")
        return ChangeSet(files=files, members=members, head=head)
