"""Cargo.toml reading utilities.

Uses tomlkit, the same parser the rest of the tooling uses for manifests, so
member manifests and the workspace root are read the same way.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ManifestError

MANIFEST = "Cargo.toml"


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a Cargo.toml file.

    Raises:
        ManifestError: If the file cannot be read or is not valid TOML.
    """
    try:
        text = path.read_text()
    except OSError as exc:
        raise ManifestError(f"Cannot read manifest {path}: {exc}") from exc
    return parse_manifest(text, str(path))


def parse_manifest(text: str, source: str) -> tomlkit.TOMLDocument:
    """Parse Cargo.toml content read from a file or a git blob.

    Args:
        text: Manifest content.
        source: Where the content came from, for error messages.

    Raises:
        ManifestError: If the content is not valid TOML.
    """
    try:
        return tomlkit.parse(text)
    except ParseError as exc:
        raise ManifestError(f"Cannot read manifest {source}: {exc}") from exc


def get_package_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the package name from [package].name.

    Args:
        doc: Parsed Cargo.toml document.
        fallback: Value to return if name is not specified.
    """
    return str(doc.get("package", {}).get("name", fallback))


def _inherit(
    key: str, value: Any, workspace_doc: tomlkit.TOMLDocument | None
) -> Any:
    """Resolve `<key>.workspace = true` against [workspace.package].<key>.

    Values that are not inheritance tables are returned unchanged.

    Raises:
        ManifestError: If the value is a table other than `{ workspace = true }`
                       or the workspace root does not define the key.
    """
    if not isinstance(value, dict):
        return value
    if not value.get("workspace"):
        raise ManifestError(f"Unsupported [package].{key} value: {value!r}")
    inherited = None
    if workspace_doc is not None:
        inherited = workspace_doc.get("workspace", {}).get("package", {}).get(key)
    if inherited is None:
        raise ManifestError(
            f"{key}.workspace = true but [workspace.package].{key} is not set"
        )
    return inherited


def get_package_version(
    doc: tomlkit.TOMLDocument, workspace_doc: tomlkit.TOMLDocument | None = None
) -> str:
    """Extract the declared version from [package].version.

    Handles `version.workspace = true` by reading [workspace.package].version
    from the workspace root manifest. A package without any version is
    treated as "0.0.0", which is what Cargo assumes.

    Raises:
        ManifestError: If the version is inherited but the workspace root
                       does not define one.
    """
    version = doc.get("package", {}).get("version", "0.0.0")
    return str(_inherit("version", version, workspace_doc))


def is_publishable(
    doc: tomlkit.TOMLDocument, workspace_doc: tomlkit.TOMLDocument | None = None
) -> bool:
    """Return False if the package opts out of publishing.

    Both `publish = false` and `publish = []` (no allowed registry) mean the
    package never reaches a registry, so it can never need a bump. Cargo
    also refuses to publish a package that declares no version.
    `publish.workspace = true` is resolved against the workspace root.
    """
    package = doc.get("package", {})
    if "version" not in package:
        return False
    publish = _inherit("publish", package.get("publish", True), workspace_doc)
    if isinstance(publish, bool):
        return publish
    return len(publish) > 0


def get_check_settings(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract [workspace.metadata.bump-check] from the workspace root.

    Returns an empty dict when the table is absent.
    """
    settings = doc.get("workspace", {}).get("metadata", {}).get("bump-check", {})
    return dict(settings)
