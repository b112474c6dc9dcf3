"""Rich-aware presenters for CLI output."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fontconfd.assembly.pipeline import AssemblyResult

from .state import CLIState


def _build_table(*, title: str | None, columns: list[str]) -> Any:
    from rich import box
    from rich.table import Table

    table = Table(
        title=title or None,
        box=box.SQUARE,
        show_edge=True,
        header_style="bold cyan",
    )
    for column in columns:
        table.add_column(column)
    return table


def fragment_rows(result: AssemblyResult) -> list[dict[str, Any]]:
    """Return one row per ordered fragment, in application order."""
    entries = list(result.directory.entries.values())
    position = {id(fragment): index for index, fragment in enumerate(result.ordered)}
    entries.sort(key=lambda entry: position.get(id(entry.fragment), -1))
    rows: list[dict[str, Any]] = []
    for entry in entries:
        path = entry.path
        rows.append(
            {
                "priority": None if entry.fragment.entry_point else entry.fragment.priority,
                "name": entry.fragment.name,
                "path": path,
                "package": entry.package,
                "shadowed": list(entry.shadowed),
            }
        )
    return rows


def present_fragment_table(state: CLIState, result: AssemblyResult) -> None:
    """Print the ordered fragment table."""
    table = _build_table(
        title="Configuration Fragments",
        columns=["Priority", "Name", "Path", "Package", "Shadowed"],
    )
    for row in fragment_rows(result):
        priority = "-" if row["priority"] is None else str(row["priority"])
        shadowed = ", ".join(row["shadowed"]) or "-"
        table.add_row(priority, row["name"], row["path"], row["package"], shadowed)
    state.console.print(table)


def present_build_summary(state: CLIState, result: AssemblyResult, target: Path) -> None:
    """Print a short summary once the directory has been written."""
    console = state.console
    console.print(f"[green]Assembled {len(result.directory)} files[/] in {target}")
    for artifact in result.cache_artifacts:
        console.print(f"  cache ({artifact.architecture.value}): {artifact.path}")
    if result.degraded is not None:
        console.print(f"  [yellow]cache degraded[/]: {result.degraded}")


__all__ = ["fragment_rows", "present_build_summary", "present_fragment_table"]
