"""Implementation of the ``fontconfd build`` command."""

from __future__ import annotations

from pathlib import Path
import subprocess
from typing import Annotated

import click
import typer

from fontconfd.assembly.merger import CollisionPolicy
from fontconfd.core.exceptions import FontconfdError

from .._options import (
    BasePackageOption,
    BuildPlatformOption,
    ConfigOption,
    DebugOption,
    DiscoverOption,
    ExtraPackageOption,
    FcCache32Option,
    FontconfigDiscoveryOption,
    FontDirOption,
    HostPlatformOption,
    NoCacheOption,
    PolicyOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..presenter import present_build_summary
from ..state import emit_error, set_cli_state
from ..utils import build_assembler, build_request, resolve_platform


def build(
    output: Annotated[
        Path,
        typer.Argument(
            help="Directory receiving fonts.conf and conf.d/.",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
    config: ConfigOption = None,
    font_dir: FontDirOption = None,
    discover: DiscoverOption = None,
    fontconfig: FontconfigDiscoveryOption = False,
    base: BasePackageOption = None,
    package: ExtraPackageOption = None,
    policy: PolicyOption = CollisionPolicy.LAST_WINS,
    host_platform: HostPlatformOption = None,
    build_platform: BuildPlatformOption = None,
    fc_cache_32: FcCache32Option = None,
    no_cache: NoCacheOption = False,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Assemble the fontconfig configuration directory into OUTPUT."""

    ctx = click.get_current_context(silent=True)
    typer_ctx = ctx if isinstance(ctx, typer.Context) else None
    state = set_cli_state(ctx=typer_ctx, verbosity=verbose, debug=debug)

    platform = resolve_platform(host_platform, build_platform)
    emitter = CliEmitter(state)
    try:
        request = build_request(
            config=config,
            font_dirs=font_dir or [],
            search_roots=discover or [],
            use_fontconfig=fontconfig,
            base=base or [],
            extra=package or [],
            platform=platform,
        )
        assembler = build_assembler(
            policy=policy,
            platform=platform,
            use_cache=not no_cache,
            emitter=emitter,
            fc_cache_32=fc_cache_32,
        )
        result = assembler.assemble_directory(request, output)
    except (FontconfdError, subprocess.CalledProcessError, OSError) as exc:
        if state.show_tracebacks:
            raise
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    present_build_summary(state, result, output)


__all__ = ["build"]
