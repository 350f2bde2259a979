"""Shared test fixtures."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest
import tomlkit

from bump_check.errors import CommentPostError, RegistryQueryError


class FakeRegistry:
    """Registry returning canned versions and recording queries."""

    def __init__(self, published: dict[str, str | None] | None = None) -> None:
        self.published = published or {}
        self.queries: list[str] = []

    def latest_published(self, package: str) -> str | None:
        self.queries.append(package)
        return self.published.get(package)


class UnreachableRegistry:
    def latest_published(self, package: str) -> str | None:
        raise RegistryQueryError("connection refused", package)


class FakeReview:
    """Review client with a fixed file list that records posted comments."""

    def __init__(self, files: list[str] | None = None, fail_post: bool = False) -> None:
        self.files = files or []
        self.fail_post = fail_post
        self.comments: list[tuple[str, str]] = []

    def list_files(self, pull_request: str) -> list[str]:
        return list(self.files)

    def post_comment(self, pull_request: str, body: str) -> None:
        if self.fail_post:
            raise CommentPostError(f"Cannot comment on pull request {pull_request}")
        self.comments.append((pull_request, body))


def write_member(
    root: Path, path: str, version: str, name: str | None = None, **extra: str
) -> Path:
    """Write <root>/<path>/Cargo.toml with a [package] table."""
    member_dir = root / path
    member_dir.mkdir(parents=True, exist_ok=True)
    lines = ["[package]", f'name = "{name or Path(path).name}"']
    if version:
        lines.append(f'version = "{version}"')
    lines.extend(f"{key} = {value}" for key, value in extra.items())
    (member_dir / "Cargo.toml").write_text("\n".join(lines) + "\n")
    return member_dir


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace with members under crates/ and credential/."""
    (tmp_path / "Cargo.toml").write_text(
        '[workspace]\nmembers = ["crates/*", "credential/*"]\n'
        "\n[workspace.package]\n"
        'version = "0.9.0"\n'
    )
    write_member(tmp_path, "crates/foo", "1.2.0")
    write_member(tmp_path, "credential/bar", "0.3.0")
    return tmp_path


@pytest.fixture
def sample_manifest() -> tomlkit.TOMLDocument:
    """A parsed member manifest."""
    content = """\
[package]
name = "cargo-util"
version = "0.2.4"
edition = "2021"

[dependencies]
anyhow = "1.0"
"""
    return tomlkit.parse(content)


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not found")


def init_repo(root: Path) -> Callable[..., str]:
    """Create an empty git repository at root and return a git runner for it."""

    def run(*args: str) -> str:
        return subprocess.run(
            ["git", "-C", str(root), *args],
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        ).stdout

    run("init", "-q")
    run("config", "user.email", "ci@example.com")
    run("config", "user.name", "CI")
    run("config", "commit.gpgsign", "false")
    return run


def commit_file(run: Callable[..., str], root: Path, path: str, content: str) -> None:
    target = root / path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    run("add", "-A")
    run("commit", "-q", "-m", f"update {path}")


