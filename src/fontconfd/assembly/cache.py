"""Memoised coordination of font cache builds.

The cache builder is an external collaborator: given a set of font directories
and an architecture it produces an opaque binary index and returns its path.
Builds are expensive, so :class:`CacheCoordinator` guarantees that each
distinct ``(directory set, architecture, builder version)`` key is built at
most once, even when several threads ask for it at the same time. Results are
also recorded in an :class:`ArtifactIndex` on disk so later processes can reuse
them.
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import Future
from dataclasses import dataclass
import hashlib
import json
import os
from pathlib import Path
import tempfile
from threading import Lock
from typing import Protocol, runtime_checkable

from fontconfd.core.cache_dir import cache_location
from fontconfd.core.diagnostics import DiagnosticEmitter, NullEmitter
from fontconfd.core.platform import Architecture, BuildPlatform


INDEX_VERSION = 1


@runtime_checkable
class CacheBuilder(Protocol):
    """External collaborator producing a font cache for a directory set."""

    @property
    def version(self) -> str: ...

    def supports(self, architecture: Architecture) -> bool: ...

    def build(self, font_directories: list[Path], architecture: Architecture) -> Path: ...


def artifact_digest(
    font_directories: Iterable[str], architecture: Architecture, builder_version: str
) -> str:
    """Return the content address of a cache artifact."""
    payload = {
        "architecture": architecture.value,
        "builder": builder_version,
        "directories": sorted(set(font_directories)),
    }
    return hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class CacheArtifact:
    """Pre-generated cache for one directory set and architecture."""

    font_directories: frozenset[str]
    architecture: Architecture
    digest: str
    path: Path

    def to_dict(self) -> dict[str, object]:
        return {
            "font_directories": sorted(self.font_directories),
            "architecture": self.architecture.value,
            "digest": self.digest,
            "path": str(self.path),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> CacheArtifact:
        return cls(
            font_directories=frozenset(str(entry) for entry in payload["font_directories"]),  # type: ignore[union-attr]
            architecture=Architecture(payload["architecture"]),
            digest=str(payload["digest"]),
            path=Path(str(payload["path"])),
        )


class ArtifactIndex:
    """JSON index of previously built artifacts stored in the user cache."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or cache_location().index_path

    def _read(self) -> dict[str, dict[str, object]]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return {}
        if not isinstance(raw, dict) or raw.get("version") != INDEX_VERSION:
            return {}
        artifacts = raw.get("artifacts")
        return artifacts if isinstance(artifacts, dict) else {}

    def load(self, digest: str) -> CacheArtifact | None:
        """Return the recorded artifact for ``digest`` if it still exists on disk."""
        entry = self._read().get(digest)
        if not isinstance(entry, dict):
            return None
        try:
            artifact = CacheArtifact.from_dict(entry)
        except (KeyError, TypeError, ValueError):
            return None
        if not artifact.path.exists():
            return None
        return artifact

    def save(self, artifact: CacheArtifact) -> None:
        """Record ``artifact``; readers never observe a partially written index."""
        artifacts = self._read()
        artifacts[artifact.digest] = artifact.to_dict()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"version": INDEX_VERSION, "artifacts": artifacts}
        with tempfile.NamedTemporaryFile(
            mode="w",
            suffix=".json",
            prefix=".artifacts-",
            dir=self.path.parent,
            encoding="utf-8",
            delete=False,
        ) as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)
            temp_path = Path(handle.name)
        try:
            os.replace(temp_path, self.path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise


class CacheCoordinator:
    """Resolve cache artifacts, building each distinct key at most once."""

    def __init__(
        self,
        builder: CacheBuilder,
        *,
        platform: BuildPlatform | None = None,
        index: ArtifactIndex | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.builder = builder
        self.platform = platform or BuildPlatform.detect()
        self.index = index
        self.emitter = emitter or NullEmitter()
        self._lock = Lock()
        self._index_lock = Lock()
        self._artifacts: dict[str, Future[CacheArtifact]] = {}

    @property
    def secondary_available(self) -> bool:
        """Whether an i686 cache can be built next to the native one."""
        return self.platform.supports_secondary and self.builder.supports(Architecture.I686)

    def resolve(
        self,
        font_directories: Iterable[str | Path],
        want_secondary_architecture: bool = False,
    ) -> CacheArtifact | None:
        """Return the primary artifact, or None when the cache cannot be built here."""
        artifacts = self.resolve_all(font_directories, want_secondary_architecture)
        return artifacts[0] if artifacts else None

    def resolve_all(
        self,
        font_directories: Iterable[str | Path],
        want_secondary_architecture: bool = False,
    ) -> tuple[CacheArtifact, ...]:
        """Return every artifact to reference from the cache fragment."""
        if not self.platform.can_execute:
            return ()
        directories = frozenset(str(entry) for entry in font_directories)
        artifacts = [self._resolve_one(directories, Architecture.NATIVE)]
        if want_secondary_architecture and self.secondary_available:
            artifacts.append(self._resolve_one(directories, Architecture.I686))
        return tuple(artifacts)

    def _resolve_one(self, directories: frozenset[str], architecture: Architecture) -> CacheArtifact:
        digest = artifact_digest(directories, architecture, self.builder.version)
        with self._lock:
            future = self._artifacts.get(digest)
            owner = future is None
            if owner:
                future = Future()
                self._artifacts[digest] = future
        if not owner:
            return future.result()

        try:
            artifact = self._load_or_build(directories, architecture, digest)
        except BaseException as exc:
            with self._lock:
                self._artifacts.pop(digest, None)
            future.set_exception(exc)
            raise
        future.set_result(artifact)
        return artifact

    def _load_or_build(
        self, directories: frozenset[str], architecture: Architecture, digest: str
    ) -> CacheArtifact:
        if self.index is not None:
            with self._index_lock:
                cached = self.index.load(digest)
            if cached is not None:
                self.emitter.event(
                    "cache_reuse",
                    {"architecture": architecture.value, "digest": digest, "reason": "index"},
                )
                return cached

        self.emitter.event(
            "cache_build",
            {"architecture": architecture.value, "directories": len(directories)},
        )
        path = self.builder.build([Path(entry) for entry in sorted(directories)], architecture)
        artifact = CacheArtifact(
            font_directories=directories,
            architecture=architecture,
            digest=digest,
            path=Path(path),
        )
        if self.index is not None:
            with self._index_lock:
                self.index.save(artifact)
        return artifact

    def forget(self) -> None:
        """Drop the in-memory memo table."""
        with self._lock:
            self._artifacts.clear()


__all__ = [
    "ArtifactIndex",
    "CacheArtifact",
    "CacheBuilder",
    "CacheCoordinator",
    "artifact_digest",
]
