"""Package registry client.

Answers one question: what is the highest version of a package already
published? The default implementation reads a Cargo sparse index
(https://index.crates.io), where each package has a file of JSON lines, one
per published version.

Sparse index file layout:
    {"name": "foo", "vers": "0.1.0", "yanked": false, ...}
    {"name": "foo", "vers": "0.2.0", "yanked": true, ...}
"""

from __future__ import annotations

import json
from typing import Protocol

import httpx

from .errors import ManifestError, RegistryQueryError
from .versions import max_version


class Registry(Protocol):
    def latest_published(self, package: str) -> str | None: ...


def index_path(package: str) -> str:
    """Return the sparse index path of a package.

    Examples:
        "a" → "1/a"
        "ab" → "2/ab"
        "abc" → "3/a/abc"
        "serde" → "se/rd/serde"
    """
    name = package.lower()
    if len(name) <= 2:
        return f"{len(name)}/{name}"
    if len(name) == 3:
        return f"3/{name[0]}/{name}"
    return f"{name[:2]}/{name[2:4]}/{name}"


class SparseIndexRegistry:
    """Registry backed by a sparse HTTP index.

    Yanked versions are counted: a yanked version can never be published
    again, so the next release still has to go past it.

    Args:
        index_url: Base URL of the index.
        client: Optional httpx.Client; one is created when omitted.
        timeout: Request timeout in seconds for the created client.
    """

    def __init__(
        self,
        index_url: str = "https://index.crates.io",
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.index_url = index_url.rstrip("/")
        self.client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "bump-check"},
        )

    def versions(self, package: str) -> list[str] | None:
        """Return every published version of a package, or None if unknown.

        Raises:
            RegistryQueryError: On network errors, unexpected statuses, or
                                lines that are not index entries.
        """
        url = f"{self.index_url}/{index_path(package)}"
        try:
            response = self.client.get(url)
        except httpx.HTTPError as exc:
            raise RegistryQueryError(
                f"Registry unreachable while querying {package}: {exc}", package
            ) from exc

        # The sparse protocol answers 404 (or 410/451 on crates.io) for
        # packages that were never published
        if response.status_code in (404, 410, 451):
            return None
        if response.status_code != 200:
            raise RegistryQueryError(
                f"Registry returned HTTP {response.status_code} for {package}",
                package,
            )

        found: list[str] = []
        for line in response.text.splitlines():
            if not line.strip():
                continue
            try:
                found.append(str(json.loads(line)["vers"]))
            except (json.JSONDecodeError, KeyError, TypeError) as exc:
                raise RegistryQueryError(
                    f"Malformed index entry for {package}: {line[:80]!r}", package
                ) from exc
        return found

    def latest_published(self, package: str) -> str | None:
        """Return the highest published version, or None if never published."""
        found = self.versions(package)
        if not found:
            return None
        try:
            return max_version(found)
        except ManifestError as exc:
            raise RegistryQueryError(
                f"Registry lists an invalid version for {package}: {exc}", package
            ) from exc

    def close(self) -> None:
        self.client.close()
