"""Custom exception hierarchy for the configuration assembly pipeline."""

from __future__ import annotations

from collections.abc import Mapping, Sequence


class FontconfdError(RuntimeError):
    """Base exception for configuration assembly failures."""


class InvalidSettings(FontconfdError, ValueError):
    """Raised when settings or build inputs are malformed.

    Always raised before any fragment is materialized.
    """


class CollisionError(FontconfdError):
    """Raised when several packages write the same path under a strict policy."""

    def __init__(
        self,
        path: str,
        packages: Sequence[str],
        *,
        collisions: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self.path = path
        self.packages = tuple(packages)
        self.collisions = {
            key: tuple(value) for key, value in (collisions or {path: packages}).items()
        }
        message = f"Path '{path}' is written by several packages: {', '.join(self.packages)}"
        extra = len(self.collisions) - 1
        if extra > 0:
            message += f" (and {extra} more colliding path{'s' if extra > 1 else ''})"
        super().__init__(message)


class TemplateError(FontconfdError):
    """Raised when a bundled fragment template is missing or fails to render."""


class OrderingError(FontconfdError):
    """Raised when the merged directory cannot be linearised unambiguously."""


class CacheBuildDegraded(RuntimeWarning):
    """Recorded (never raised) when the font cache cannot be generated.

    The pipeline keeps going with a cache fragment that only lists the font
    directories; fontconfig then scans them at runtime.
    """


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "CacheBuildDegraded",
    "CollisionError",
    "FontconfdError",
    "InvalidSettings",
    "OrderingError",
    "TemplateError",
    "exception_hint",
    "exception_messages",
]
