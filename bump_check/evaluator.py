"""Version-bump evaluation.

For each touched member, compare the version declared in its Cargo.toml
with the highest version the registry already has:

    declared > published  → satisfied
    declared <= published → needs-bump
    never published       → satisfied (a first release is always new)

Registry failures propagate. A member whose published version is unknown is
never reported as satisfied.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Iterable
from pathlib import Path

import tomlkit

from .errors import ManifestError
from .models import BumpVerdict, Verdict, WorkspaceMember
from .registry import Registry
from .shell import git as run_git
from .shell import step, warn
from .toml import (
    MANIFEST,
    get_package_name,
    get_package_version,
    is_publishable,
    load_manifest,
    parse_manifest,
)
from .versions import needs_bump


def discover_member_paths(root: Path, prefixes: Iterable[str]) -> list[str]:
    """List every member directory holding a Cargo.toml under the prefixes."""
    found: list[str] = []
    for prefix in prefixes:
        base = root / prefix.strip("/")
        if not base.is_dir():
            continue
        for manifest in sorted(base.glob(f"*/{MANIFEST}")):
            found.append(str(manifest.parent.relative_to(root)))
    return sorted(found)


class Evaluator:
    """Decide which members need a version bump.

    Args:
        registry: Registry client answering latest_published().
        root: Workspace root the member paths are relative to.
        revision: Commit to read manifests from. None reads the working tree.
        git: Callable running git and returning stdout; raises
             CalledProcessError on failure.
    """

    def __init__(
        self,
        registry: Registry,
        root: Path,
        revision: str | None = None,
        git: Callable[..., str] = run_git,
    ) -> None:
        self.registry = registry
        self.root = root
        self.revision = revision
        self._git = git
        self._workspace_doc = self._read_manifest(MANIFEST)

    def _read_manifest(self, path: str) -> tomlkit.TOMLDocument | None:
        """Parse <root>/<path>, or None if it does not exist at the revision."""
        if self.revision is None:
            manifest = self.root / path
            if not manifest.exists():
                return None
            return load_manifest(manifest)

        source = f"{self.revision}:{path}"
        try:
            text = self._git("-C", str(self.root), "show", source)
        except subprocess.CalledProcessError:
            # No such blob at the revision
            return None
        except OSError as exc:
            raise ManifestError(f"Cannot run git to read {source}: {exc}") from exc
        return parse_manifest(text, source)

    def load_member(self, path: str) -> WorkspaceMember | None:
        """Read one member's manifest.

        Returns None when the member directory has no manifest, which is the
        case for members deleted by the change.
        """
        doc = self._read_manifest(f"{path}/{MANIFEST}")
        if doc is None:
            return None
        name = Path(path).name
        return WorkspaceMember(
            name=name,
            path=path,
            package=get_package_name(doc, name),
            version=get_package_version(doc, self._workspace_doc),
            publish=is_publishable(doc, self._workspace_doc),
        )

    def load_members(self, paths: Iterable[str]) -> list[WorkspaceMember]:
        """Read manifests for the given member paths.

        Members without a manifest and members that opt out of publishing
        are dropped, with a note in the log.
        """
        step("Reading member manifests")

        members: list[WorkspaceMember] = []
        for path in paths:
            member = self.load_member(path)
            if member is None:
                warn(f"{path}: no {MANIFEST}, skipping (member removed?)")
                continue
            if not member.publish:
                print(f"  {member.package}: not publishable, skipping")
                continue
            print(f"  {member.package} {member.version} ({member.path})")
            members.append(member)
        return members

    def evaluate(self, members: Iterable[WorkspaceMember]) -> list[BumpVerdict]:
        """Query the registry and judge each member.

        Returns one verdict per member, sorted by member name. An empty input
        makes no registry calls.

        Raises:
            RegistryQueryError: If any registry query fails.
        """
        members = sorted(members, key=lambda m: (m.name, m.path))
        if not members:
            return []

        step("Querying registry for published versions")

        verdicts: list[BumpVerdict] = []
        for member in members:
            published = self.registry.latest_published(member.package)
            member = member.model_copy(update={"published": published})
            if needs_bump(member.version, published):
                verdict = Verdict.NEEDS_BUMP
            else:
                verdict = Verdict.SATISFIED
            print(
                f"  {member.package}: local {member.version}, "
                f"published {published or '-'} → {verdict.value}"
            )
            verdicts.append(BumpVerdict(member=member, verdict=verdict))
        return verdicts
