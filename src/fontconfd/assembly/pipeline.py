"""High-level orchestration of a configuration build."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from fontconfd.core.config import Settings
from fontconfd.core.diagnostics import DiagnosticEmitter, NullEmitter
from fontconfd.core.exceptions import CacheBuildDegraded, InvalidSettings
from fontconfd.core.fragments import ContributingPackage, Fragment
from fontconfd.core.platform import BuildPlatform

from .cache import CacheArtifact, CacheCoordinator
from .merger import MergedConfigDirectory, Merger
from .ordering import OrderingResolver
from .store import GENERATED_PACKAGE, FragmentStore


@dataclass(slots=True)
class AssemblyRequest:
    """Inputs of a single build."""

    settings: Settings
    font_directories: Sequence[str | Path] = ()
    base_packages: Sequence[ContributingPackage] = ()
    extra_packages: Sequence[ContributingPackage] = ()
    platform: BuildPlatform = field(default_factory=BuildPlatform.detect)

    def normalized_directories(self) -> list[str]:
        directories: list[str] = []
        for entry in self.font_directories:
            if not PurePath(entry).is_absolute():
                raise InvalidSettings(f"Font directory must be an absolute path: {entry}")
            directories.append(str(entry))
        return directories


@dataclass(slots=True)
class AssemblyResult:
    """Outcome of a build: the merged directory and its application order."""

    directory: MergedConfigDirectory
    ordered: tuple[Fragment, ...]
    generated: ContributingPackage
    cache_artifacts: tuple[CacheArtifact, ...] = ()
    degraded: CacheBuildDegraded | None = None

    def write(self, target: Path) -> bool:
        return self.directory.write(target)


class ConfigAssembler:
    """Turn settings and contributing packages into an ordered configuration."""

    def __init__(
        self,
        coordinator: CacheCoordinator | None = None,
        *,
        merger: Merger | None = None,
        resolver: OrderingResolver | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.coordinator = coordinator
        self.emitter = emitter or NullEmitter()
        self.merger = merger or Merger(emitter=self.emitter)
        self.resolver = resolver or OrderingResolver()

    def assemble(self, request: AssemblyRequest) -> AssemblyResult:
        settings = request.settings
        if not isinstance(settings, Settings):
            raise InvalidSettings(f"Expected Settings, got {type(settings).__name__}")
        directories = request.normalized_directories()

        platform_match = request.platform.can_execute
        store = FragmentStore(directories, platform_match=platform_match)
        fragments = store.materialize(settings)

        artifacts: tuple[CacheArtifact, ...] = ()
        degraded: CacheBuildDegraded | None = None
        if not platform_match:
            degraded = CacheBuildDegraded(
                f"cross build ({request.platform.build} -> {request.platform.host}); "
                "font cache omitted"
            )
        elif self.coordinator is None:
            degraded = CacheBuildDegraded("no cache builder configured; font cache omitted")
        else:
            coordinator = self.coordinator
            if (
                settings.cache_32bit
                and coordinator.platform.supports_secondary
                and not coordinator.secondary_available
            ):
                degraded = CacheBuildDegraded(
                    "no i686 fc-cache configured; 32-bit font cache omitted"
                )
            artifacts = coordinator.resolve_all(directories, settings.cache_32bit)
            fragments = store.attach_cache(fragments, [artifact.path for artifact in artifacts])

        if degraded is not None:
            self.emitter.event("cache_degraded", {"reason": str(degraded)})
            self.emitter.warning(f"Font cache degraded: {degraded}")

        supplied = [*request.base_packages, *request.extra_packages]
        if not any(fragment.entry_point for package in supplied for fragment in package):
            fragments.append(store.entry_point())

        generated = ContributingPackage(name=GENERATED_PACKAGE, fragments=tuple(fragments))
        packages = [*request.base_packages, generated, *request.extra_packages]
        directory = self.merger.merge(packages)
        ordered = self.resolver.order(directory)
        return AssemblyResult(
            directory=directory,
            ordered=ordered,
            generated=generated,
            cache_artifacts=artifacts,
            degraded=degraded,
        )

    def assemble_directory(self, request: AssemblyRequest, target: Path) -> AssemblyResult:
        """Assemble and write the result to ``target``."""
        result = self.assemble(request)
        changed = result.write(target)
        self.emitter.event(
            "directory_written",
            {"target": str(target), "entries": len(result.directory), "changed": changed},
        )
        return result


def assemble(
    settings: Settings,
    font_directories: Sequence[str | Path] = (),
    *,
    base_packages: Sequence[ContributingPackage] = (),
    extra_packages: Sequence[ContributingPackage] = (),
    platform: BuildPlatform | None = None,
    coordinator: CacheCoordinator | None = None,
) -> AssemblyResult:
    """Convenience wrapper around :class:`ConfigAssembler`."""
    request = AssemblyRequest(
        settings=settings,
        font_directories=font_directories,
        base_packages=base_packages,
        extra_packages=extra_packages,
        platform=platform or BuildPlatform.detect(),
    )
    return ConfigAssembler(coordinator).assemble(request)


__all__ = [
    "AssemblyRequest",
    "AssemblyResult",
    "ConfigAssembler",
    "assemble",
]
