"""Fold contributing packages into a single configuration directory.

Packages are applied left to right as an explicit map-of-maps merge instead of
an overlay of symlinks. Only the output path of a fragment takes part in
collision handling; content is never inspected.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
import hashlib
import os
from pathlib import Path
import shutil
import tempfile
from types import MappingProxyType

from fontconfd.core.diagnostics import DiagnosticEmitter, NullEmitter
from fontconfd.core.exceptions import CollisionError
from fontconfd.core.fragments import ContributingPackage, Fragment, prefix_width


class CollisionPolicy(Enum):
    """How the merger resolves two packages writing the same path."""

    LAST_WINS = "last"
    """The later package in merge order wins (``ignoreCollisions`` behaviour)."""

    FIRST_WINS = "first"
    """The earliest package keeps the path; later writers are discarded."""

    STRICT = "strict"
    """Any collision aborts the merge with :class:`CollisionError`."""


@dataclass(frozen=True, slots=True)
class MergedEntry:
    """Winning fragment for one path, with provenance."""

    path: str
    fragment: Fragment
    package: str
    shadowed: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MergedConfigDirectory:
    """Read-only mapping of output paths to the fragment that won them."""

    entries: Mapping[str, MergedEntry] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ordered = {path: self.entries[path] for path in sorted(self.entries)}
        object.__setattr__(self, "entries", MappingProxyType(ordered))

    def __getitem__(self, path: str) -> MergedEntry:
        return self.entries[path]

    def __contains__(self, path: object) -> bool:
        return path in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def paths(self) -> list[str]:
        return list(self.entries)

    def fragments(self) -> list[Fragment]:
        return [entry.fragment for entry in self.entries.values()]

    def shadowed(self) -> dict[str, tuple[str, ...]]:
        """Return the shadowed contributors of every overridden path."""
        return {path: entry.shadowed for path, entry in self.entries.items() if entry.shadowed}

    def digest(self) -> str:
        """Return a stable digest over every path and its content."""
        return _tree_digest(
            (path, entry.fragment.content.encode("utf-8")) for path, entry in self.entries.items()
        )

    def write(self, target: Path) -> bool:
        """Materialise the directory at ``target``.

        The tree is written next to ``target`` and swapped in once complete, so
        readers never observe a partial directory. Returns False when ``target``
        already holds exactly this content.
        """
        target = Path(target)
        if target.is_dir() and _directory_digest(target) == self.digest():
            return False

        target.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{target.name}-", dir=target.parent))
        try:
            for path, entry in self.entries.items():
                destination = staging / path
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_text(entry.fragment.content, encoding="utf-8")
            if target.exists():
                backup = Path(tempfile.mkdtemp(prefix=f".{target.name}-old-", dir=target.parent))
                backup.rmdir()
                os.replace(target, backup)
                os.replace(staging, target)
                shutil.rmtree(backup, ignore_errors=True)
            else:
                os.replace(staging, target)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        return True


def _tree_digest(items: Iterable[tuple[str, bytes]]) -> str:
    hasher = hashlib.sha256()
    for path, payload in sorted(items):
        hasher.update(path.encode("utf-8"))
        hasher.update(b"\0")
        hasher.update(hashlib.sha256(payload).digest())
    return hasher.hexdigest()


def _directory_digest(root: Path) -> str:
    return _tree_digest(
        (file_path.relative_to(root).as_posix(), file_path.read_bytes())
        for file_path in root.rglob("*")
        if file_path.is_file()
    )


class Merger:
    """Combine packages in merge order under a collision policy.

    ``rules`` maps ``fnmatch`` patterns on output paths to a policy overriding
    the default one; the first matching pattern applies.
    """

    def __init__(
        self,
        policy: CollisionPolicy = CollisionPolicy.LAST_WINS,
        *,
        rules: Mapping[str, CollisionPolicy] | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.policy = policy
        self.rules = dict(rules or {})
        self.emitter = emitter or NullEmitter()

    def policy_for(self, path: str) -> CollisionPolicy:
        for pattern, policy in self.rules.items():
            if fnmatchcase(path, pattern):
                return policy
        return self.policy

    def merge(
        self, packages: Sequence[ContributingPackage], *, strict: bool | None = None
    ) -> MergedConfigDirectory:
        """Return the merged directory or raise :class:`CollisionError`."""
        width = prefix_width(
            fragment.priority
            for package in packages
            for fragment in package
            if fragment.path is None
        )

        writers: dict[str, list[tuple[str, Fragment]]] = {}
        for package in packages:
            for fragment in package:
                writers.setdefault(fragment.file_path(width), []).append((package.name, fragment))

        collisions: dict[str, list[str]] = {}
        entries: dict[str, MergedEntry] = {}
        shadowings: list[dict[str, object]] = []
        for path, contributions in writers.items():
            policy = CollisionPolicy.STRICT if strict else self.policy_for(path)
            if len(contributions) > 1 and policy is CollisionPolicy.STRICT:
                collisions[path] = [name for name, _ in contributions]
                continue
            if policy is CollisionPolicy.FIRST_WINS:
                winner_index = 0
            else:
                winner_index = len(contributions) - 1
            package_name, fragment = contributions[winner_index]
            shadowed = tuple(
                name for index, (name, _) in enumerate(contributions) if index != winner_index
            )
            entries[path] = MergedEntry(
                path=path, fragment=fragment, package=package_name, shadowed=shadowed
            )
            if shadowed:
                shadowings.append(
                    {"path": path, "package": package_name, "shadowed": list(shadowed)}
                )

        if collisions:
            first = sorted(collisions)[0]
            raise CollisionError(first, collisions[first], collisions=collisions)
        for payload in shadowings:
            self.emitter.event("fragment_shadowed", payload)
        return MergedConfigDirectory(entries)


def merge(
    packages: Sequence[ContributingPackage],
    *,
    policy: CollisionPolicy = CollisionPolicy.LAST_WINS,
    strict: bool | None = None,
) -> MergedConfigDirectory:
    """Merge ``packages`` with a one-off :class:`Merger`."""
    return Merger(policy).merge(packages, strict=strict)


__all__ = [
    "CollisionPolicy",
    "MergedConfigDirectory",
    "MergedEntry",
    "Merger",
    "merge",
]
