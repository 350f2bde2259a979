"""Version parsing and comparison utilities.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0").
Ordering follows SemVer precedence: major, minor, patch, then pre-release
identifiers. Build metadata never affects the order.
"""

from __future__ import annotations

import re

import semver

from .errors import ManifestError

# Numeric core followed by an optional "-pre" / "+build" tail
_VERSION_RE = re.compile(r"^(?P<core>\d+(?:\.\d+)*)(?P<tail>[-+].*)?$")


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding the numeric core with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3-beta.1" → "1.2.3-beta.1"

    Raises:
        ManifestError: If the string is not a version at all.
    """
    match = _VERSION_RE.match(version_str.strip())
    if not match:
        raise ManifestError(f"Invalid version: {version_str!r}")
    parts = match.group("core").split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    if len(parts) > 3:
        raise ManifestError(f"Invalid version: {version_str!r}")
    try:
        return semver.Version.parse(".".join(parts) + (match.group("tail") or ""))
    except ValueError as exc:
        raise ManifestError(f"Invalid version: {version_str!r}") from exc


def is_greater(version_str: str, other_str: str) -> bool:
    """Return True if version_str has strictly higher precedence than other_str."""
    version = parse_version(version_str).replace(build=None)
    other = parse_version(other_str).replace(build=None)
    return version > other


def needs_bump(declared: str, published: str | None) -> bool:
    """Decide whether a declared version must be bumped before merge.

    A never-published package needs no bump: its first release is new by
    definition. Otherwise the declared version must be strictly greater than
    the highest published one.

    Examples:
        needs_bump("1.2.0", "1.1.0") → False
        needs_bump("0.3.0", "0.3.0") → True
        needs_bump("0.3.0", None) → False
    """
    if published is None:
        return False
    return not is_greater(declared, published)


def max_version(versions: list[str]) -> str | None:
    """Return the version with the highest precedence, or None if empty."""
    if not versions:
        return None
    return max(versions, key=lambda v: parse_version(v).replace(build=None))
