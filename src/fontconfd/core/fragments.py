"""Fragment and contributing package models."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
import hashlib
import logging
from pathlib import Path
import re

from fontconfd.core.exceptions import CollisionError


logger = logging.getLogger(__name__)

CONF_DIR = "conf.d"
ENTRY_POINT = "fonts.conf"
MIN_PREFIX_WIDTH = 2

_FRAGMENT_FILENAME = re.compile(r"^(?P<priority>\d+)-(?P<name>[^/]+)\.conf$")


def prefix_width(priorities: Iterable[int]) -> int:
    """Return the zero-padding width keeping lexicographic and numeric order aligned."""
    widest = max((len(str(priority)) for priority in priorities), default=MIN_PREFIX_WIDTH)
    return max(MIN_PREFIX_WIDTH, widest)


def parse_fragment_filename(filename: str) -> tuple[int, str] | None:
    """Split ``NN-slug.conf`` into ``(priority, slug)``; return None when it does not match."""
    match = _FRAGMENT_FILENAME.match(filename)
    if match is None:
        return None
    return int(match.group("priority")), match.group("name")


@dataclass(frozen=True, slots=True)
class Fragment:
    """A named, prioritised unit of fontconfig configuration."""

    name: str
    priority: int
    content: str
    source_package: str = ""
    path: str | None = None
    entry_point: bool = False

    def file_path(self, width: int = MIN_PREFIX_WIDTH) -> str:
        """Return the output path relative to ``etc/fonts``."""
        if self.path is not None:
            return self.path
        return f"{CONF_DIR}/{self.priority:0{width}d}-{self.name}.conf"

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.priority, self.name)

    @property
    def digest(self) -> str:
        return hashlib.sha256(self.content.encode("utf-8")).hexdigest()

    def with_source(self, package: str) -> Fragment:
        """Return a copy attributed to ``package``."""
        return Fragment(
            name=self.name,
            priority=self.priority,
            content=self.content,
            source_package=package,
            path=self.path,
            entry_point=self.entry_point,
        )


@dataclass(frozen=True, slots=True)
class ContributingPackage:
    """Ordered, immutable group of fragments sharing a source identity."""

    name: str
    fragments: tuple[Fragment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        attributed = tuple(
            fragment if fragment.source_package == self.name else fragment.with_source(self.name)
            for fragment in self.fragments
        )
        object.__setattr__(self, "fragments", attributed)

        width = prefix_width(fragment.priority for fragment in attributed if fragment.path is None)
        seen: dict[str, int] = {}
        for fragment in attributed:
            key = fragment.file_path(width)
            seen[key] = seen.get(key, 0) + 1
        duplicates = sorted(key for key, count in seen.items() if count > 1)
        if duplicates:
            raise CollisionError(
                duplicates[0],
                [self.name] * seen[duplicates[0]],
                collisions={key: [self.name] * seen[key] for key in duplicates},
            )

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)


def _resolve_fonts_root(path: Path) -> Path:
    candidate = path / "etc" / "fonts"
    if candidate.is_dir():
        return candidate
    return path


def load_package(path: Path, *, name: str | None = None) -> ContributingPackage:
    """Build a package from an on-disk ``etc/fonts`` tree.

    ``conf.d/NN-slug.conf`` files become fragments and ``fonts.conf`` becomes the
    entry point. Files that fontconfig would not pick up are ignored.
    """
    root = _resolve_fonts_root(path)
    if not root.is_dir():
        raise FileNotFoundError(f"Configuration package does not exist: {path}")
    package_name = name or path.name

    fragments: list[Fragment] = []
    entry = root / ENTRY_POINT
    if entry.is_file():
        fragments.append(
            Fragment(
                name="fonts",
                priority=0,
                content=entry.read_text(encoding="utf-8"),
                path=ENTRY_POINT,
                entry_point=True,
            )
        )

    conf_dir = root / CONF_DIR
    if conf_dir.is_dir():
        for file_path in sorted(conf_dir.iterdir()):
            if not file_path.is_file():
                continue
            parsed = parse_fragment_filename(file_path.name)
            if parsed is None:
                logger.debug("Skipping %s: not a numbered fragment", file_path)
                continue
            priority, slug = parsed
            fragments.append(
                Fragment(
                    name=slug,
                    priority=priority,
                    content=file_path.read_text(encoding="utf-8"),
                )
            )

    return ContributingPackage(name=package_name, fragments=tuple(fragments))


__all__ = [
    "CONF_DIR",
    "ENTRY_POINT",
    "ContributingPackage",
    "Fragment",
    "load_package",
    "parse_fragment_filename",
    "prefix_width",
]
