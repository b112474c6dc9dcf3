"""Font directory discovery collaborators."""

from __future__ import annotations

from collections.abc import Iterable
import os
from pathlib import Path
import shutil
import subprocess
from typing import Protocol, runtime_checkable


FONT_SUFFIXES = frozenset(
    {".otf", ".ttf", ".ttc", ".otc", ".pfb", ".pfa", ".pcf", ".bdf", ".woff", ".woff2"}
)


def _is_font_file(path: Path) -> bool:
    suffixes = [suffix.lower() for suffix in path.suffixes]
    if suffixes and suffixes[-1] == ".gz":
        suffixes = suffixes[:-1]
    return bool(suffixes) and suffixes[-1] in FONT_SUFFIXES


def _unique_paths(paths: Iterable[Path]) -> list[Path]:
    seen: dict[Path, None] = {}
    for path in paths:
        seen.setdefault(path, None)
    return list(seen)


@runtime_checkable
class FontDiscovery(Protocol):
    """Source of installed font directories."""

    def list_font_packages(self) -> list[Path]: ...


class StaticDiscovery:
    """Return a fixed list of directories."""

    def __init__(self, directories: Iterable[str | Path]) -> None:
        self.directories = _unique_paths(
            Path(entry).expanduser().resolve() for entry in directories
        )

    def list_font_packages(self) -> list[Path]:
        return list(self.directories)


class SearchPathDiscovery:
    """Return every directory below ``roots`` that directly holds font files."""

    def __init__(self, roots: Iterable[str | Path]) -> None:
        self.roots = [Path(root).expanduser().resolve() for root in roots]

    def list_font_packages(self) -> list[Path]:
        found: list[Path] = []
        for root in self.roots:
            if not root.is_dir():
                continue
            for file_path in sorted(root.rglob("*")):
                if file_path.is_file() and _is_font_file(file_path):
                    found.append(file_path.parent)
        return _unique_paths(found)


class FontconfigDiscovery:
    """Ask ``fc-list`` which directories hold the fonts it currently knows."""

    def __init__(self, executable: str = "fc-list") -> None:
        self.executable = executable

    def list_font_packages(self) -> list[Path]:
        if os.environ.get("FONTCONFD_SKIP_FONT_CHECKS"):
            return []
        executable = shutil.which(self.executable)
        if executable is None:
            return []
        try:
            proc = subprocess.run(
                [executable, "-f", "%{file}\n"],
                check=True,
                capture_output=True,
                text=True,
            )
        except (OSError, subprocess.CalledProcessError):
            return []

        directories: list[Path] = []
        for line in proc.stdout.splitlines():
            if not line.strip():
                continue
            directories.append(Path(line.strip()).parent)
        return _unique_paths(sorted(directories))


class CompositeDiscovery:
    """Concatenate the results of several discoveries, dropping duplicates."""

    def __init__(self, sources: Iterable[FontDiscovery]) -> None:
        self.sources = list(sources)

    def list_font_packages(self) -> list[Path]:
        return _unique_paths(
            directory for source in self.sources for directory in source.list_font_packages()
        )


__all__ = [
    "FONT_SUFFIXES",
    "CompositeDiscovery",
    "FontDiscovery",
    "FontconfigDiscovery",
    "SearchPathDiscovery",
    "StaticDiscovery",
]
