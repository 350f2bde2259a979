"""Check pipeline: extract → evaluate → report.

This module wires the three steps of the version-bump check:
1. Find the workspace members touched by the change (git diff or the
   pull request's file list)
2. Read each member's declared version and compare it with the highest
   version already in the registry
3. Print the members that need a bump, comment on the pull request, and
   return a non-zero status so merge gating blocks the change

Clients for the review system and the registry are passed in, so the
pipeline itself never reaches for ambient state.
"""

from __future__ import annotations

from collections.abc import Iterable

from .changes import ChangeSetExtractor
from .config import CheckConfig
from .errors import ExitCode, ResolutionError
from .evaluator import Evaluator, discover_member_paths
from .registry import Registry
from .report import Reporter, render_status_table
from .review import ReviewClient
from .shell import step


def run_check(
    config: CheckConfig,
    *,
    registry: Registry,
    review: ReviewClient | None = None,
) -> ExitCode:
    """Execute the version-bump check.

    Args:
        config: Run configuration with defaults already resolved.
        registry: Registry client used to look up published versions.
        review: Review client for pull-request file lists and comments.

    Returns:
        ExitCode.SUCCESS if nothing changed or nothing needs a bump,
        ExitCode.FAILURE if at least one member needs a bump.

    Raises:
        ResolutionError: If a commit or pull request cannot be resolved.
        RegistryQueryError: If the registry cannot be queried.
        ManifestError: If a member manifest is unreadable.
    """
    changes = ChangeSetExtractor(config, review=review).extract()
    reporter = Reporter(
        review=review if config.comment else None,
        pull_request=config.pull_request,
        announce=config.announce,
    )
    if changes.is_empty:
        return reporter.nothing_changed()

    # Commit runs read manifests as of head, whatever is checked out
    evaluator = Evaluator(registry, config.root, revision=changes.head)
    members = evaluator.load_members(changes.members)
    verdicts = evaluator.evaluate(members)
    return reporter.report(verdicts)


def run_status(
    config: CheckConfig,
    *,
    registry: Registry,
    packages: Iterable[str] = (),
) -> str:
    """Print the publish status of workspace members.

    Args:
        config: Resolved run configuration; root and root_prefixes are used.
        registry: Registry client used to look up published versions.
        packages: Package or member names to inspect. Empty means every
                  member under the root prefixes.

    Returns:
        The rendered table (empty if there is nothing to show).
    """
    evaluator = Evaluator(registry, config.root)
    paths = discover_member_paths(config.root, config.root_prefixes)

    wanted = set(packages)
    if wanted:
        selected = []
        matched: set[str] = set()
        for path in paths:
            member = evaluator.load_member(path)
            if member and (member.package in wanted or member.name in wanted):
                selected.append(path)
                matched.update({member.package, member.name} & wanted)
        unknown = sorted(wanted - matched)
        if unknown:
            raise ResolutionError(
                f"No workspace member matches: {', '.join(unknown)}"
            )
        paths = selected

    verdicts = evaluator.evaluate(evaluator.load_members(paths))
    table = render_status_table(verdicts)

    step("Publish status")
    print(table or "  <no publishable members>")
    return table
