"""CLI entry point for bump-check."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from bump_check.config import (
    DEFAULT_INDEX_URL,
    DEFAULT_ROOT_PREFIXES,
    CheckConfig,
    resolve_defaults,
)
from bump_check.errors import BumpCheckError
from bump_check.pipeline import run_check, run_status
from bump_check.registry import SparseIndexRegistry
from bump_check.review import GitHubReview


@contextmanager
def _errors_as_click() -> Iterator[None]:
    """Turn bump-check errors into a clean CLI error with the right status."""
    try:
        yield
    except BumpCheckError as exc:
        err = click.ClickException(str(exc))
        err.exit_code = int(exc.exit_code)
        raise err from exc


def _workspace_options(f):
    f = click.option(
        "--index-url",
        default=None,
        help=f"Sparse registry index to query. [default: {DEFAULT_INDEX_URL}]",
    )(f)
    f = click.option(
        "--root-prefix",
        "root_prefixes",
        multiple=True,
        help=(
            "Top-level directory holding publishable members (repeatable). "
            f"[default: {', '.join(DEFAULT_ROOT_PREFIXES)}]"
        ),
    )(f)
    f = click.option(
        "--root",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=".",
        show_default=True,
        help="Workspace root.",
    )(f)
    return f


@click.group()
@click.version_option(package_name="bump-check")
def cli() -> None:
    """Flag workspace members whose version must be bumped before merge."""


@cli.command()
@click.argument("pull_request", required=False)
@click.option(
    "--base",
    envvar="BASE_SHA",
    help="Base commit. Defaults to the parent of --head. [env: BASE_SHA]",
)
@click.option(
    "--head",
    envvar="HEAD_SHA",
    help="Head commit. Defaults to HEAD. [env: HEAD_SHA]",
)
@click.option("--repo", default=None, help="OWNER/REPO of the pull request.")
@click.option(
    "--no-comment", is_flag=True, help="Do not post the report on the pull request."
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Say nothing when no member needs a bump (exit status is unchanged).",
)
@_workspace_options
def check(
    pull_request: str | None,
    base: str | None,
    head: str | None,
    repo: str | None,
    no_comment: bool,
    quiet: bool,
    root: Path,
    root_prefixes: tuple[str, ...],
    index_url: str | None,
) -> None:
    """Check changed members for a needed version bump.

    With PULL_REQUEST, the changed files come from the pull request and the
    report is posted on it. Without it, base and head commits are diffed
    locally.

    Exits 1 when at least one member needs a bump.
    """
    config = CheckConfig(
        root=root.resolve(),
        base=base,
        head=head,
        pull_request=pull_request,
        root_prefixes=root_prefixes or None,
        index_url=index_url,
        comment=not no_comment,
        announce=not quiet,
    )
    with _errors_as_click():
        config = resolve_defaults(config)
        registry = SparseIndexRegistry(config.index_url)
        try:
            status = run_check(config, registry=registry, review=GitHubReview(repo))
        finally:
            registry.close()
    raise SystemExit(int(status))


@cli.command()
@click.option(
    "-p",
    "--package",
    "packages",
    multiple=True,
    help="Package to inspect (repeatable). Defaults to all members.",
)
@_workspace_options
def status(
    packages: tuple[str, ...],
    root: Path,
    root_prefixes: tuple[str, ...],
    index_url: str | None,
) -> None:
    """Show the publish status of workspace members."""
    config = CheckConfig(
        root=root.resolve(),
        root_prefixes=root_prefixes or None,
        index_url=index_url,
    )
    with _errors_as_click():
        config = resolve_defaults(config)
        registry = SparseIndexRegistry(config.index_url)
        try:
            run_status(config, registry=registry, packages=packages)
        finally:
            registry.close()


def main() -> None:
    cli()
