"""Layered fontconfig configuration assembly.

Architecture
: `FragmentStore` renders the built-in fragments (`00-nixos-cache.conf`,
  `10-nixos-rendering.conf`, `52-nixos-default-fonts.conf`, ...) from an
  immutable `Settings` value. Identical settings always yield identical bytes.
: `CacheCoordinator` drives the external cache builder (`FcCacheBuilder` by
  default), memoising one build per font-directory set and architecture and
  sharing in-flight builds between threads. Cross builds skip it entirely.
: `Merger` folds the contributing packages (base packages, the generated
  `fontconfig-conf` package, extra packages) into a `MergedConfigDirectory`,
  resolving path collisions with a last-wins, first-wins or strict policy and
  recording which packages were shadowed.
: `OrderingResolver` linearises the merged directory by `(priority, name)`,
  the order fontconfig reads `conf.d` in.
: `ConfigAssembler` runs the whole pipeline and optionally writes the result
  atomically.

Goal
: Compose independently authored fragments into one reproducible `etc/fonts`
  tree where later layers override earlier ones without editing them.
"""

from fontconfd.assembly.builder import FcCacheBuilder
from fontconfd.assembly.cache import (
    ArtifactIndex,
    CacheArtifact,
    CacheBuilder,
    CacheCoordinator,
    artifact_digest,
)
from fontconfd.assembly.discovery import (
    CompositeDiscovery,
    FontconfigDiscovery,
    FontDiscovery,
    SearchPathDiscovery,
    StaticDiscovery,
)
from fontconfd.assembly.merger import (
    CollisionPolicy,
    MergedConfigDirectory,
    MergedEntry,
    Merger,
    merge,
)
from fontconfd.assembly.ordering import OrderingResolver, is_ordered, order
from fontconfd.assembly.pipeline import (
    AssemblyRequest,
    AssemblyResult,
    ConfigAssembler,
    assemble,
)
from fontconfd.assembly.store import GENERATED_PACKAGE, FragmentStore


__all__ = [
    "GENERATED_PACKAGE",
    "ArtifactIndex",
    "AssemblyRequest",
    "AssemblyResult",
    "CacheArtifact",
    "CacheBuilder",
    "CacheCoordinator",
    "CollisionPolicy",
    "CompositeDiscovery",
    "ConfigAssembler",
    "FcCacheBuilder",
    "FontDiscovery",
    "FontconfigDiscovery",
    "FragmentStore",
    "MergedConfigDirectory",
    "MergedEntry",
    "Merger",
    "OrderingResolver",
    "SearchPathDiscovery",
    "StaticDiscovery",
    "artifact_digest",
    "assemble",
    "is_ordered",
    "merge",
    "order",
]
