"""Tests for bump_check.changes."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from bump_check.changes import ChangeSetExtractor, member_paths
from bump_check.config import CheckConfig
from bump_check.errors import ResolutionError

from .conftest import FakeReview, commit_file, init_repo, requires_git

PREFIXES = ("crates", "credential", "benches")


def _config(root: Path, **kwargs) -> CheckConfig:
    return CheckConfig(root=root, root_prefixes=PREFIXES, **kwargs)


class TestMemberPaths:
    def test_first_segment_after_prefix(self) -> None:
        paths = ["crates/foo/src/lib.rs", "crates/foo/Cargo.toml"]
        assert member_paths(paths, PREFIXES) == ("crates/foo",)

    def test_all_prefixes(self) -> None:
        paths = [
            "benches/benchsuite/src/lib.rs",
            "credential/bar/src/main.rs",
            "crates/foo/src/lib.rs",
        ]
        assert member_paths(paths, PREFIXES) == (
            "benches/benchsuite",
            "crates/foo",
            "credential/bar",
        )

    def test_ignores_paths_outside_prefixes(self) -> None:
        paths = ["src/cargo/lib.rs", "README.md", "tests/testsuite/main.rs"]
        assert member_paths(paths, PREFIXES) == ()

    def test_ignores_files_directly_under_prefix(self) -> None:
        assert member_paths(["crates/README.md"], PREFIXES) == ()

    def test_prefix_must_be_whole_segment(self) -> None:
        assert member_paths(["crates-extra/foo/lib.rs"], PREFIXES) == ()

    def test_duplicates_collapse_and_sort(self) -> None:
        paths = ["crates/zed/a.rs", "crates/abc/b.rs", "crates/zed/c.rs"]
        assert member_paths(paths, PREFIXES) == ("crates/abc", "crates/zed")

    def test_custom_prefixes(self) -> None:
        assert member_paths(["libs/x/y.rs"], ["libs/"]) == ("libs/x",)


def _git_stub(diff_output: str) -> MagicMock:
    """A git callable resolving any ref to sha-<ref> and returning diff_output."""

    def fake_git(*args: str) -> str:
        if "rev-parse" in args:
            ref = args[-1].removesuffix("^{commit}")
            return f"sha-{ref}"
        if "diff" in args:
            return diff_output
        raise AssertionError(f"unexpected git call: {args}")

    return MagicMock(side_effect=fake_git)


class TestFromCommits:
    @patch("bump_check.changes.step")
    def test_diffs_resolved_commits(self, mock_step: MagicMock, tmp_path: Path) -> None:
        git = _git_stub("crates/foo/src/lib.rs\0credential/bar/Cargo.toml\0")
        config = _config(tmp_path, base="main", head="HEAD")

        changes = ChangeSetExtractor(config, git=git).extract()

        assert changes.members == ("crates/foo", "credential/bar")
        assert changes.files == ("crates/foo/src/lib.rs", "credential/bar/Cargo.toml")
        assert changes.head == "sha-HEAD"
        git.assert_any_call(
            "-C",
            str(tmp_path),
            "diff",
            "--name-only",
            "-z",
            "sha-main",
            "sha-HEAD",
            "--",
            "crates/",
            "credential/",
            "benches/",
        )

    @patch("bump_check.changes.step")
    def test_empty_diff_is_valid(self, mock_step: MagicMock, tmp_path: Path) -> None:
        config = _config(tmp_path, base="HEAD^", head="HEAD")

        changes = ChangeSetExtractor(config, git=_git_stub("")).extract()

        assert changes.is_empty
        assert changes.files == ()

    @patch("bump_check.changes.step")
    def test_unresolvable_ref(self, mock_step: MagicMock, tmp_path: Path) -> None:
        git = MagicMock(side_effect=subprocess.CalledProcessError(1, ["git"]))
        config = _config(tmp_path, base="nope", head="HEAD")

        with pytest.raises(ResolutionError, match="nope"):
            ChangeSetExtractor(config, git=git).extract()

    @patch("bump_check.changes.step")
    def test_empty_rev_parse_output(self, mock_step: MagicMock, tmp_path: Path) -> None:
        config = _config(tmp_path, base="x", head="HEAD")

        with pytest.raises(ResolutionError):
            ChangeSetExtractor(config, git=MagicMock(return_value="")).extract()

    @patch("bump_check.changes.step")
    def test_unset_base_is_rejected(self, mock_step: MagicMock, tmp_path: Path) -> None:
        config = _config(tmp_path, head="HEAD")

        with pytest.raises(ResolutionError):
            ChangeSetExtractor(config, git=_git_stub("")).extract()


class TestFromPullRequest:
    @patch("bump_check.changes.step")
    def test_uses_review_file_list(self, mock_step: MagicMock, tmp_path: Path) -> None:
        review = FakeReview(
            ["crates/foo/src/lib.rs", "crates/foo/src/lib.rs", "src/main.rs"]
        )
        git = MagicMock()
        config = _config(tmp_path, pull_request="42")

        changes = ChangeSetExtractor(config, review=review, git=git).extract()

        assert changes.members == ("crates/foo",)
        assert changes.files == ("crates/foo/src/lib.rs", "src/main.rs")
        git.assert_not_called()

    @patch("bump_check.changes.step")
    def test_requires_review_client(self, mock_step: MagicMock, tmp_path: Path) -> None:
        config = _config(tmp_path, pull_request="42")

        with pytest.raises(ResolutionError):
            ChangeSetExtractor(config).extract()


@requires_git
@patch("bump_check.changes.step")
class TestFromCommitsInRepo:
    def test_non_ascii_member_name(
        self, mock_step: MagicMock, tmp_path: Path
    ) -> None:
        run = init_repo(tmp_path)
        commit_file(run, tmp_path, "README.md", "hello\n")
        commit_file(run, tmp_path, "crates/fóo/x.rs", "fn main() {}\n")

        config = _config(tmp_path, base="HEAD^", head="HEAD")

        changes = ChangeSetExtractor(config).extract()

        assert changes.members == ("crates/fóo",)
        assert changes.files == ("crates/fóo/x.rs",)

    def test_head_is_resolved_sha(self, mock_step: MagicMock, tmp_path: Path) -> None:
        run = init_repo(tmp_path)
        commit_file(run, tmp_path, "crates/foo/a.rs", "1\n")
        commit_file(run, tmp_path, "crates/foo/a.rs", "2\n")

        config = _config(tmp_path, base="HEAD^", head="HEAD")

        changes = ChangeSetExtractor(config).extract()

        assert changes.head == run("rev-parse", "HEAD").strip()
