"""Diagnostic abstractions shared across the assembly pipeline."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None and self.debug_enabled:
            self._logger.warning(message, exc_info=exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "cache_build":
        architecture = data.get("architecture") or "native"
        count = data.get("directories", 0)
        return f"Building font cache ({architecture}) for {count} font directories"

    if name == "cache_reuse":
        architecture = data.get("architecture") or "native"
        reason = data.get("reason") or "memory"
        return f"Reusing font cache ({architecture}, {reason}): {data.get('digest', '')[:12]}"

    if name == "cache_degraded":
        reason = data.get("reason") or "unsupported platform"
        return f"Font cache skipped: {reason}"

    if name == "fragment_shadowed":
        path = data.get("path") or "<unknown>"
        winner = data.get("package") or "<unknown>"
        shadowed = ", ".join(data.get("shadowed") or ()) or "-"
        return f"{path}: {winner} overrides {shadowed}"

    if name == "directory_written":
        target = data.get("target") or "<unknown>"
        if not data.get("changed", True):
            return f"Configuration unchanged: {target}"
        return f"Wrote {data.get('entries', 0)} files to {target}"

    return None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "format_event_message",
]
