"""Materialise the built-in fontconfig fragments from a settings value.

Fontconfig reads ``conf.d`` in file name order, so the number prepended to the
file name decides the order of parsing:

``0``
: font directories and pre-generated caches.

``10``
: rendering settings.

``50``
: per-user configuration include.

``51``
: ``local.conf`` (read through the stock ``51-local.conf``).

``52``
: default families.

``53``
: bitmap and Type 1 policies.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from fontconfd.core.config import Settings
from fontconfd.core.fragments import CONF_DIR, ENTRY_POINT, Fragment
from fontconfd.core.templates import render_template


GENERATED_PACKAGE = "fontconfig-conf"

CACHE_PRIORITY = 0
RENDERING_PRIORITY = 10
USER_PRIORITY = 50
LOCAL_PRIORITY = 51
DEFAULT_FONTS_PRIORITY = 52
POLICY_PRIORITY = 53

CACHE_FRAGMENT = "nixos-cache"
RENDERING_FRAGMENT = "nixos-rendering"
USER_FRAGMENT = "user"
LOCAL_FRAGMENT = "nixos-local"
DEFAULT_FONTS_FRAGMENT = "nixos-default-fonts"
NO_BITMAPS_FRAGMENT = "no-bitmaps"
EMBEDDED_BITMAPS_FRAGMENT = "nixos-embedded-bitmaps"
REJECT_TYPE1_FRAGMENT = "nixos-reject-type1"

ENTRY_POINT_FRAGMENT = "fonts"
LOCAL_CONF_PATH = "local.conf"
HINT_STYLE = "hintslight"


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return tuple(seen)


class FragmentStore:
    """Deterministic producer of the canonical fragment set."""

    def __init__(
        self, font_directories: Iterable[str | Path] = (), *, platform_match: bool = True
    ) -> None:
        self.font_directories = _unique(str(directory) for directory in font_directories)
        self.platform_match = platform_match

    def materialize(self, settings: Settings) -> list[Fragment]:
        """Return the built-in fragments, cache references left out."""
        fragments = [
            self.cache_fragment(()),
            self._fragment(
                RENDERING_FRAGMENT,
                RENDERING_PRIORITY,
                "rendering.conf.jinja",
                settings=settings,
                hint_style=HINT_STYLE,
            ),
        ]

        if settings.include_user_conf:
            fragments.append(self._fragment(USER_FRAGMENT, USER_PRIORITY, "user.conf.jinja"))

        if settings.local_conf:
            fragments.append(
                Fragment(
                    name=LOCAL_FRAGMENT,
                    priority=LOCAL_PRIORITY,
                    content=settings.local_conf,
                    source_package=GENERATED_PACKAGE,
                    path=LOCAL_CONF_PATH,
                )
            )

        fragments.append(
            self._fragment(
                DEFAULT_FONTS_FRAGMENT,
                DEFAULT_FONTS_PRIORITY,
                "default-fonts.conf.jinja",
                bindings=settings.default_fonts.bindings(),
            )
        )

        if not settings.allow_bitmaps:
            fragments.append(
                self._fragment(NO_BITMAPS_FRAGMENT, POLICY_PRIORITY, "no-bitmaps.conf.jinja")
            )
        fragments.append(
            self._fragment(
                EMBEDDED_BITMAPS_FRAGMENT,
                POLICY_PRIORITY,
                "embedded-bitmaps.conf.jinja",
                settings=settings,
            )
        )
        if not settings.allow_type1:
            fragments.append(
                self._fragment(REJECT_TYPE1_FRAGMENT, POLICY_PRIORITY, "reject-type1.conf.jinja")
            )
        return fragments

    def cache_fragment(self, cache_directories: Sequence[str | Path]) -> Fragment:
        """Render the priority-0 fragment.

        Cache references are only embedded when the build platform matches the
        host; otherwise fontconfig falls back to scanning the directories.
        """
        references: tuple[str, ...] = ()
        if self.platform_match:
            references = _unique(str(entry) for entry in cache_directories)
        return self._fragment(
            CACHE_FRAGMENT,
            CACHE_PRIORITY,
            "cache.conf.jinja",
            font_directories=self.font_directories,
            cache_directories=references,
        )

    def attach_cache(
        self, fragments: Sequence[Fragment], cache_directories: Sequence[str | Path]
    ) -> list[Fragment]:
        """Replace the cache placeholder with a fragment referencing ``cache_directories``."""
        replacement = self.cache_fragment(cache_directories)
        return [
            replacement
            if fragment.name == CACHE_FRAGMENT and fragment.priority == CACHE_PRIORITY
            else fragment
            for fragment in fragments
        ]

    def entry_point(self) -> Fragment:
        """Render a minimal `fonts.conf` for trees no package provides one for."""
        return Fragment(
            name=ENTRY_POINT_FRAGMENT,
            priority=CACHE_PRIORITY,
            content=render_template("fonts.conf.jinja", conf_dir=CONF_DIR),
            source_package=GENERATED_PACKAGE,
            path=ENTRY_POINT,
            entry_point=True,
        )

    @staticmethod
    def _fragment(name: str, priority: int, template: str, **context: object) -> Fragment:
        return Fragment(
            name=name,
            priority=priority,
            content=render_template(template, **context),
            source_package=GENERATED_PACKAGE,
        )


__all__ = [
    "CACHE_FRAGMENT",
    "CACHE_PRIORITY",
    "DEFAULT_FONTS_FRAGMENT",
    "EMBEDDED_BITMAPS_FRAGMENT",
    "ENTRY_POINT_FRAGMENT",
    "GENERATED_PACKAGE",
    "LOCAL_CONF_PATH",
    "LOCAL_FRAGMENT",
    "NO_BITMAPS_FRAGMENT",
    "REJECT_TYPE1_FRAGMENT",
    "RENDERING_FRAGMENT",
    "USER_FRAGMENT",
    "FragmentStore",
]
