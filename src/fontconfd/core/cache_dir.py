"""Location of the pre-built font caches and their artifact index.

Everything lives under ``<root>/fontconfig``. The root is the first of
``$FONTCONFD_CACHE_DIR``, ``$XDG_CACHE_HOME/fontconfd`` and
``~/.cache/fontconfd``, resolved on every lookup so that environment changes
apply without restarting the process.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import os
from pathlib import Path
import shutil
import threading


CACHE_DIR_ENV = "FONTCONFD_CACHE_DIR"
NAMESPACE = "fontconfig"


def default_cache_root() -> Path:
    explicit = os.environ.get(CACHE_DIR_ENV)
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".cache"
    return base / "fontconfd"


@dataclass(frozen=True, slots=True)
class CacheLocation:
    """Paths owned by fontconfd below a cache root."""

    root: Path

    @property
    def namespace(self) -> Path:
        return self.root / NAMESPACE

    @property
    def artifacts_dir(self) -> Path:
        """Directory receiving one subdirectory per ``fc-cache`` run."""
        return self.namespace / "caches"

    @property
    def index_path(self) -> Path:
        return self.namespace / "artifacts.json"

    def clear(self) -> Path | None:
        """Delete every pre-built cache along with the index.

        Returns the removed directory, or None when there was nothing to remove.
        The root itself is left alone since it may be shared.
        """
        if not self.namespace.exists():
            return None
        shutil.rmtree(self.namespace)
        return self.namespace


_override: CacheLocation | None = None
_override_lock = threading.Lock()


def cache_location() -> CacheLocation:
    """Return the active cache location."""
    with _override_lock:
        override = _override
    if override is not None:
        return override
    return CacheLocation(default_cache_root())


@contextmanager
def cache_location_context(root: Path) -> Iterator[CacheLocation]:
    """Pin the cache location to ``root`` for the duration of the block."""
    global _override
    location = CacheLocation(Path(root))
    with _override_lock:
        previous, _override = _override, location
    try:
        yield location
    finally:
        with _override_lock:
            _override = previous


__all__ = [
    "CACHE_DIR_ENV",
    "NAMESPACE",
    "CacheLocation",
    "cache_location",
    "cache_location_context",
    "default_cache_root",
]
