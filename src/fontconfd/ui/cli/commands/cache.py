"""Implementation of the ``fontconfd cache-clear`` command."""

from __future__ import annotations

import typer

from fontconfd.core.cache_dir import cache_location

from ..state import get_cli_state


def cache_clear() -> None:
    """Remove pre-generated font caches and the artifact index."""
    removed = cache_location().clear()
    console = get_cli_state().console
    if removed is None:
        console.print("Nothing to clear.")
        raise typer.Exit()
    console.print(f"Removed {removed}")


__all__ = ["cache_clear"]
