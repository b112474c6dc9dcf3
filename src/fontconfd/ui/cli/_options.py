"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from fontconfd.assembly.merger import CollisionPolicy


INPUTS_PANEL = "Inputs"
PACKAGES_PANEL = "Packages"
CACHE_PANEL = "Font Cache"
DIAGNOSTICS_PANEL = "Diagnostics"

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Settings file (.yaml, .yml, .toml or .json).",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

FontDirOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--font-dir",
        help="Font directory listed in the cache fragment. Repeat for several directories.",
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

DiscoverOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--discover",
        help="Search root scanned for directories holding font files.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

FontconfigDiscoveryOption = Annotated[
    bool,
    typer.Option(
        "--fontconfig",
        help="Add the directories of every font currently reported by fc-list.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

BasePackageOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--base",
        help="Base configuration package (an etc/fonts tree) merged before generated fragments.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=PACKAGES_PANEL,
    ),
]

ExtraPackageOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--package",
        help="Extra configuration package merged after generated fragments.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=PACKAGES_PANEL,
    ),
]

PolicyOption = Annotated[
    CollisionPolicy,
    typer.Option(
        "--policy",
        help="Collision policy applied when packages write the same path.",
        case_sensitive=False,
        rich_help_panel=PACKAGES_PANEL,
    ),
]

HostPlatformOption = Annotated[
    str | None,
    typer.Option(
        "--host-platform",
        help="Machine the configuration targets (defaults to the current machine).",
        rich_help_panel=CACHE_PANEL,
    ),
]

BuildPlatformOption = Annotated[
    str | None,
    typer.Option(
        "--build-platform",
        help="Machine running the build (defaults to the current machine).",
        rich_help_panel=CACHE_PANEL,
    ),
]

FcCache32Option = Annotated[
    Path | None,
    typer.Option(
        "--fc-cache-32",
        help="fc-cache binary built for i686, used for the 32-bit cache on x86_64 hosts.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=CACHE_PANEL,
    ),
]

NoCacheOption = Annotated[
    bool,
    typer.Option(
        "--no-cache",
        help="Do not pre-generate font caches; only list font directories.",
        rich_help_panel=CACHE_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
