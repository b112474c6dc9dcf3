"""Implementation of the ``fontconfd show`` command."""

from __future__ import annotations

import json
import subprocess
from typing import Annotated

import click
import typer

from fontconfd.assembly.merger import CollisionPolicy
from fontconfd.core.exceptions import FontconfdError

from .._options import (
    CACHE_PANEL,
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
    PolicyOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..presenter import fragment_rows, present_fragment_table
from ..state import emit_error, set_cli_state
from ..utils import build_assembler, build_request, resolve_platform


def show(
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
    cache: Annotated[
        bool,
        typer.Option(
            "--cache/--no-cache",
            help="Pre-generate font caches so the table reflects the cache fragment.",
            rich_help_panel=CACHE_PANEL,
        ),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the fragment list as JSON."),
    ] = False,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Print the ordered fragments without writing anything."""

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
            use_cache=cache,
            emitter=emitter,
            fc_cache_32=fc_cache_32,
        )
        result = assembler.assemble(request)
    except (FontconfdError, subprocess.CalledProcessError, OSError) as exc:
        if state.show_tracebacks:
            raise
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(fragment_rows(result), indent=2))
        return
    present_fragment_table(state, result)


__all__ = ["show"]
