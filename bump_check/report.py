"""Report rendering and delivery.

The report is plain markdown so the same text reads fine in a CI log and as
a review comment. Rendering depends only on the verdicts and sorts by member
name, so re-running on the same inputs yields a byte-identical body.
"""

from __future__ import annotations

from collections.abc import Iterable

from .errors import CommentPostError, ExitCode
from .models import BumpVerdict
from .review import ReviewClient
from .shell import step, warn

NOTICE = (
    "### :warning: Require at least a patch version bump for each of the "
    "following packages:"
)
NO_MEMBERS_MESSAGE = "No file changed in workspace members."
NO_BUMP_MESSAGE = "No version bump needed for workspace members."


def _sorted(verdicts: Iterable[BumpVerdict]) -> list[BumpVerdict]:
    return sorted(verdicts, key=lambda v: (v.member.name, v.member.path))


def render_table(rows: list[tuple[str, str, str, str]], last_header: str) -> str:
    """Render rows as an aligned markdown table.

    | name | crates.io | local | <last_header> |
    """
    header = ("name", "crates.io", "local", last_header)
    separator = tuple("-" * len(h) for h in header)
    table = [header, separator, *rows]
    widths = [max(len(row[i]) for row in table) for i in range(4)]

    lines: list[str] = []
    for row in table:
        cells = "".join(f"| {cell.ljust(width)} " for cell, width in zip(row, widths))
        lines.append(f"{cells}|")
    return "\n".join(lines)


def render_report(verdicts: Iterable[BumpVerdict]) -> str:
    """Render the needs-bump notice for flagged members.

    Returns an empty string when no member needs a bump.
    """
    flagged = [v for v in _sorted(verdicts) if v.needs_bump]
    if not flagged:
        return ""

    lines = [NOTICE, ""]
    lines.extend(f"* {v.member.package}" for v in flagged)
    lines.append("")
    rows = [
        (v.member.package, v.member.published or "-", v.member.version, "yes")
        for v in flagged
    ]
    lines.append(render_table(rows, "need version bump?"))
    return "\n".join(lines)


def render_status_table(verdicts: Iterable[BumpVerdict]) -> str:
    """Render the publish status of every member.

    A member counts as published when its declared version is not ahead of
    the registry, i.e. exactly when it would need a bump.
    """
    rows = [
        (
            v.member.package,
            v.member.published or "-",
            v.member.version,
            "yes" if v.needs_bump else "no",
        )
        for v in _sorted(verdicts)
    ]
    if not rows:
        return ""
    return render_table(rows, "published?")


class Reporter:
    """Print the outcome, comment on the review request, pick the exit status.

    Args:
        review: Review client used to post the comment. None disables posting.
        pull_request: Review request to comment on. None disables posting.
        announce: Print a message when nothing needs a bump.
    """

    def __init__(
        self,
        review: ReviewClient | None = None,
        pull_request: str | None = None,
        announce: bool = True,
    ) -> None:
        self.review = review
        self.pull_request = pull_request
        self.announce = announce

    def nothing_changed(self) -> ExitCode:
        if self.announce:
            print(NO_MEMBERS_MESSAGE)
        return ExitCode.SUCCESS

    def report(self, verdicts: Iterable[BumpVerdict]) -> ExitCode:
        """Deliver the verdicts and return the completion status.

        A failed comment post is only a warning; the status still reflects
        the verdicts.
        """
        body = render_report(verdicts)
        if not body:
            if self.announce:
                print(NO_BUMP_MESSAGE)
            return ExitCode.SUCCESS

        step("Members needing a version bump")
        print(body)

        if self.review is not None and self.pull_request:
            try:
                self.review.post_comment(self.pull_request, body)
                print(f"\n  Commented on pull request {self.pull_request}")
            except CommentPostError as exc:
                warn(str(exc))

        return ExitCode.FAILURE
