"""Data models for bump-check.

These Pydantic models represent the values passed between the change-set
extractor, the evaluator, and the reporter. None of them is persisted; a
fresh set is discovered on every run.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class WorkspaceMember(BaseModel):
    """A publishable unit of the workspace touched by a change.

    Attributes:
        name: Directory name under its root prefix (e.g., "foo" for crates/foo).
        path: Workspace-relative directory of the member.
        package: Package name declared in the manifest.
        version: Version declared in the manifest.
        published: Highest version already in the registry, or None if the
                   package was never published.
        publish: False when the manifest opts out of publishing.
    """

    name: str
    path: str
    package: str
    version: str
    published: str | None = None
    publish: bool = True


class ChangeSet(BaseModel):
    """Files changed between two revisions and the members they belong to.

    Attributes:
        files: Changed paths, in the order the source reported them, without
               duplicates.
        members: Sorted member directories (e.g., "crates/foo") touched by
                 the change.
        head: Resolved head commit when the change came from git, None when
              it came from a review request.
    """

    files: tuple[str, ...] = ()
    members: tuple[str, ...] = ()
    head: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.members


class Verdict(str, Enum):
    NEEDS_BUMP = "needs-bump"
    SATISFIED = "satisfied"


class BumpVerdict(BaseModel):
    """Outcome of the bump check for one member."""

    member: WorkspaceMember
    verdict: Verdict

    @property
    def needs_bump(self) -> bool:
        return self.verdict is Verdict.NEEDS_BUMP
