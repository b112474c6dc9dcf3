"""Per-invocation CLI state: verbosity, traceback mode and the rich consoles."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
import sys
from typing import TYPE_CHECKING

import click

from fontconfd.core.exceptions import exception_hint, exception_messages


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "set_cli_state",
]


@dataclass(slots=True)
class CLIState:
    """Options shared by every fontconfd command."""

    verbosity: int = 0
    show_tracebacks: bool = False
    _console: Console | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def console(self) -> Console:
        """Console bound to the current ``sys.stdout``."""
        from rich.console import Console

        if self._console is None or self._console.file is not sys.stdout:
            self._console = Console(file=sys.stdout)
        return self._console

    @property
    def err_console(self) -> Console:
        """Console bound to the current ``sys.stderr``, without highlighting."""
        from rich.console import Console

        if self._err_console is None or self._err_console.file is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console


# Outlives the click context so ``main`` can still honour ``--debug``.
_LAST_STATE: ContextVar[CLIState | None] = ContextVar("fontconfd_cli_state", default=None)


def get_cli_state(ctx: click.Context | None = None) -> CLIState:
    """Return the state attached to ``ctx`` or to the running click command."""
    if ctx is None:
        ctx = click.get_current_context(silent=True)
    if ctx is not None:
        state = ctx.ensure_object(CLIState)
    else:
        state = _LAST_STATE.get() or CLIState()
    _LAST_STATE.set(state)
    return state


def set_cli_state(
    *,
    ctx: click.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
) -> CLIState:
    """Apply the ``--verbose``/``--debug`` flags of a command."""
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def _render(
    state: CLIState, level: str, style: str, message: str, exception: BaseException | None
) -> None:
    from rich.text import Text

    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))
    if exception is not None and state.verbosity == 0:
        # The innermost cause usually names the offending file or value.
        hint = exception_hint(exception)
        if hint and hint not in message:
            text.append(f" ({hint})", style=style)
    elif exception is not None:
        for cause in exception_messages(exception):
            if cause not in message:
                text.append(f"\n  caused by: {cause}", style=style)
        if state.verbosity >= 2:
            text.append(f"\n  type: {type(exception).__name__}", style=style)
    state.err_console.print(text)


def emit_warning(
    message: str, *, exception: BaseException | None = None, state: CLIState | None = None
) -> None:
    """Print a warning on stderr."""
    _render(state or get_cli_state(), "warning", "yellow", message, exception)


def emit_error(
    message: str, *, exception: BaseException | None = None, state: CLIState | None = None
) -> None:
    """Print an error on stderr."""
    _render(state or get_cli_state(), "error", "red", message, exception)


def debug_enabled() -> bool:
    """Whether the last command asked for full tracebacks."""
    state = _LAST_STATE.get()
    return state is not None and state.show_tracebacks
