"""Public CLI exports for fontconfd."""

from __future__ import annotations

from .app import app, main
from .commands import build, cache_clear, show
from .state import debug_enabled, emit_error, emit_warning, get_cli_state


__all__ = [
    "app",
    "build",
    "cache_clear",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "main",
    "show",
]
