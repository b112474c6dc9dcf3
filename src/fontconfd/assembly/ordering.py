"""Linear application order of a merged configuration directory.

Fontconfig globs ``conf.d`` and reads files in lexicographic order. Lower
numbered fragments are read first, so a later fragment's ``<edit
mode="append">`` rules win for cumulative properties while an earlier
fragment's ``<match>`` can still short-circuit what follows. The resolver does
not interpret any rule; it only guarantees a stable, reproducible order and
checks that the file names encode that order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import PurePosixPath

from fontconfd.core.exceptions import OrderingError
from fontconfd.core.fragments import CONF_DIR, Fragment

from .merger import MergedConfigDirectory


def _validate_priority(fragment: Fragment, path: str) -> None:
    priority = fragment.priority
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise OrderingError(f"{path}: priority must be an integer, got {priority!r}")
    if priority < 0:
        raise OrderingError(f"{path}: priority must be non-negative, got {priority}")


def is_ordered(fragments: Sequence[Fragment]) -> bool:
    """Return True when ``fragments`` is already sorted by ``(priority, name)``."""
    return all(
        left.sort_key < right.sort_key for left, right in zip(fragments, fragments[1:])
    )


class OrderingResolver:
    """Derive and validate the order in which fragments are applied."""

    def order(self, merged: MergedConfigDirectory) -> tuple[Fragment, ...]:
        """Return the non entry-point fragments sorted by ``(priority, name)``."""
        candidates: list[tuple[str, Fragment]] = []
        for path, entry in merged.entries.items():
            if entry.fragment.entry_point:
                continue
            _validate_priority(entry.fragment, path)
            candidates.append((path, entry.fragment))

        candidates.sort(key=lambda item: item[1].sort_key)
        self._check_unique(candidates)
        self._check_file_names(candidates)
        return tuple(fragment for _, fragment in candidates)

    @staticmethod
    def _check_unique(candidates: Iterable[tuple[str, Fragment]]) -> None:
        seen: dict[tuple[int, str], str] = {}
        for path, fragment in candidates:
            previous = seen.get(fragment.sort_key)
            if previous is not None:
                raise OrderingError(
                    f"Ambiguous order: '{previous}' and '{path}' share priority "
                    f"{fragment.priority} and name '{fragment.name}'"
                )
            seen[fragment.sort_key] = path

    @staticmethod
    def _check_file_names(candidates: Sequence[tuple[str, Fragment]]) -> None:
        names = [
            PurePosixPath(path).name
            for path, _ in candidates
            if PurePosixPath(path).parent.as_posix() == CONF_DIR
        ]
        prefixes = [name.split("-", 1)[0] for name in names]
        if prefixes != sorted(prefixes):
            raise OrderingError(
                "File name order of conf.d does not match fragment priorities: "
                + ", ".join(names)
            )


def order(merged: MergedConfigDirectory) -> tuple[Fragment, ...]:
    """Order ``merged`` with a default :class:`OrderingResolver`."""
    return OrderingResolver().order(merged)


__all__ = ["OrderingResolver", "is_ordered", "order"]
