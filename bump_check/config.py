"""Configuration for a check run.

`CheckConfig` is built once by the caller and handed to each component.
Components never read the environment themselves; the CLI resolves
environment variables, workspace settings and defaults up front.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .toml import MANIFEST, get_check_settings, load_manifest

DEFAULT_ROOT_PREFIXES = ("crates", "credential", "benches")
DEFAULT_INDEX_URL = "https://index.crates.io"


class CheckConfig(BaseModel):
    """Inputs of a single check run.

    Attributes:
        root: Workspace root directory.
        base: Base commit reference. Resolved to the parent of head by
              `resolve_defaults` when not given.
        head: Head commit reference.
        pull_request: Review request to read files from and comment on.
                      When set, the file list comes from the review system
                      instead of a local diff.
        root_prefixes: Top-level directories holding publishable members.
                       None means not given; `resolve_defaults` fills it.
        index_url: Base URL of the sparse registry index. None means not
                   given; `resolve_defaults` fills it.
        comment: Post the report on the review request.
        announce: Print a message when nothing needs a bump. Exit status is
                  0 either way.
    """

    root: Path = Field(default_factory=Path.cwd)
    base: str | None = None
    head: str | None = None
    pull_request: str | None = None
    root_prefixes: tuple[str, ...] | None = None
    index_url: str | None = None
    comment: bool = True
    announce: bool = True


def resolve_defaults(config: CheckConfig) -> CheckConfig:
    """Fill in values the caller left unset.

    - head defaults to HEAD
    - base defaults to the immediate parent of head
    - root prefixes and index URL come from [workspace.metadata.bump-check]
      in the root Cargo.toml when not given, then fall back to the built-in
      defaults
    """
    updates: dict[str, object] = {}
    head = config.head or "HEAD"
    updates["head"] = head
    if not config.base:
        updates["base"] = f"{head}^"

    settings: dict[str, Any] = {}
    manifest = config.root / MANIFEST
    if manifest.exists():
        settings = get_check_settings(load_manifest(manifest))

    if config.root_prefixes is None:
        prefixes = settings.get("root-prefixes") or DEFAULT_ROOT_PREFIXES
        updates["root_prefixes"] = tuple(str(p).strip("/") for p in prefixes)
    if config.index_url is None:
        updates["index_url"] = str(settings.get("index-url") or DEFAULT_INDEX_URL)

    return config.model_copy(update=updates)
