"""Helpers turning CLI arguments into assembly requests."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from fontconfd.assembly.builder import FcCacheBuilder
from fontconfd.assembly.cache import ArtifactIndex, CacheCoordinator
from fontconfd.assembly.discovery import (
    CompositeDiscovery,
    FontconfigDiscovery,
    FontDiscovery,
    SearchPathDiscovery,
    StaticDiscovery,
)
from fontconfd.assembly.merger import CollisionPolicy, Merger
from fontconfd.assembly.pipeline import AssemblyRequest, ConfigAssembler
from fontconfd.core.config import Settings, load_settings
from fontconfd.core.diagnostics import DiagnosticEmitter
from fontconfd.core.fragments import ContributingPackage, load_package
from fontconfd.core.platform import Architecture, BuildPlatform


def resolve_platform(host: str | None, build: str | None) -> BuildPlatform:
    """Combine explicit machine names with the detected one."""
    detected = BuildPlatform.detect()
    return BuildPlatform(host=host or detected.host, build=build or detected.build)


def discover_font_directories(
    font_dirs: Sequence[Path],
    search_roots: Sequence[Path],
    *,
    use_fontconfig: bool,
) -> list[Path]:
    sources: list[FontDiscovery] = [StaticDiscovery(font_dirs)]
    if search_roots:
        sources.append(SearchPathDiscovery(search_roots))
    if use_fontconfig:
        sources.append(FontconfigDiscovery())
    return CompositeDiscovery(sources).list_font_packages()


def load_packages(paths: Sequence[Path]) -> list[ContributingPackage]:
    packages: list[ContributingPackage] = []
    for path in paths:
        name = path.name
        taken = {package.name for package in packages}
        if name in taken:
            name = str(path)
        packages.append(load_package(path, name=name))
    return packages


def build_request(
    *,
    config: Path | None,
    font_dirs: Sequence[Path],
    search_roots: Sequence[Path],
    use_fontconfig: bool,
    base: Sequence[Path],
    extra: Sequence[Path],
    platform: BuildPlatform,
) -> AssemblyRequest:
    """Validate settings first, then gather directories and packages."""
    settings = load_settings(config) if config is not None else Settings()
    directories = discover_font_directories(font_dirs, search_roots, use_fontconfig=use_fontconfig)
    return AssemblyRequest(
        settings=settings,
        font_directories=directories,
        base_packages=load_packages(base),
        extra_packages=load_packages(extra),
        platform=platform,
    )


def build_assembler(
    *,
    policy: CollisionPolicy,
    platform: BuildPlatform,
    use_cache: bool,
    emitter: DiagnosticEmitter,
    fc_cache_32: Path | None = None,
) -> ConfigAssembler:
    coordinator = None
    if use_cache:
        executables = {Architecture.I686: str(fc_cache_32)} if fc_cache_32 is not None else {}
        coordinator = CacheCoordinator(
            FcCacheBuilder(executables=executables),
            platform=platform,
            index=ArtifactIndex(),
            emitter=emitter,
        )
    return ConfigAssembler(coordinator, merger=Merger(policy, emitter=emitter), emitter=emitter)


__all__ = [
    "build_assembler",
    "build_request",
    "discover_font_directories",
    "load_packages",
    "resolve_platform",
]
