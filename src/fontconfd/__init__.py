"""Primary public API for fontconfd."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from fontconfd.assembly import (
    AssemblyRequest,
    AssemblyResult,
    CacheArtifact,
    CacheCoordinator,
    CollisionPolicy,
    ConfigAssembler,
    FcCacheBuilder,
    FragmentStore,
    MergedConfigDirectory,
    Merger,
    OrderingResolver,
    assemble,
)
from fontconfd.core.cache_dir import CacheLocation, cache_location, cache_location_context
from fontconfd.core.config import DefaultFonts, Settings, load_settings, parse_settings
from fontconfd.core.exceptions import (
    CacheBuildDegraded,
    CollisionError,
    FontconfdError,
    InvalidSettings,
    OrderingError,
)
from fontconfd.core.fragments import ContributingPackage, Fragment, load_package
from fontconfd.core.platform import Architecture, BuildPlatform


try:
    __version__ = _pkg_version("fontconfd")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "Architecture",
    "AssemblyRequest",
    "AssemblyResult",
    "BuildPlatform",
    "CacheArtifact",
    "CacheBuildDegraded",
    "CacheCoordinator",
    "CacheLocation",
    "CollisionError",
    "CollisionPolicy",
    "ConfigAssembler",
    "ContributingPackage",
    "DefaultFonts",
    "FcCacheBuilder",
    "FontconfdError",
    "Fragment",
    "FragmentStore",
    "InvalidSettings",
    "MergedConfigDirectory",
    "Merger",
    "OrderingError",
    "OrderingResolver",
    "Settings",
    "__version__",
    "assemble",
    "cache_location",
    "cache_location_context",
    "load_package",
    "load_settings",
    "parse_settings",
]
