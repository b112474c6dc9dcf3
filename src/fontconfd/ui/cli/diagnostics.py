"""Terminal rendering of assembly diagnostics."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fontconfd.core.diagnostics import DiagnosticEmitter, format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state


# Event name -> (tag, minimum verbosity). ``cache_degraded`` is absent because
# the pipeline pairs it with a warning.
_EVENT_ROUTES: dict[str, tuple[str, int]] = {
    "cache_build": ("cache", 1),
    "cache_reuse": ("cache", 1),
    "directory_written": ("write", 1),
    "fragment_shadowed": ("merge", 2),
}


class CliEmitter(DiagnosticEmitter):
    """Print warnings and errors on stderr and log pipeline events with ``-v``.

    Cache activity and the final write show up at ``-v``; every overridden
    fragment is listed at ``-vv``.
    """

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self._state = state or get_cli_state()
        if debug_enabled is None:
            debug_enabled = self._state.show_tracebacks
        self.debug_enabled = bool(debug_enabled)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc, state=self._state)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc, state=self._state)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        route = _EVENT_ROUTES.get(name)
        if route is None:
            return
        tag, threshold = route
        if self._state.verbosity < threshold:
            return
        message = format_event_message(name, payload)
        if not message:
            return
        from rich.text import Text

        self._state.console.log(Text.assemble((f"{tag:<5} ", "bold cyan"), message))


__all__ = ["CliEmitter"]
