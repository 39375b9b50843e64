from __future__ import annotations

import json
import sys
from io import StringIO
from typing import TYPE_CHECKING, Any

from rich import box
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from coverlay.core.decorations import LineDecoration
    from coverlay.core.model import LineCoverage


def _style_percent(pct: float | None, green: float = 80, yellow: float = 50) -> str:
    if pct is None:
        return "n/a"
    text = f"{pct:.1f}%"
    if pct >= green:
        return f"[green]{text}[/green]"
    if pct >= yellow:
        return f"[yellow]{text}[/yellow]"
    return f"[red]{text}[/red]"


def _render_table(table: Table, *, color: bool) -> str:
    buf = StringIO()
    console = Console(
        file=buf,
        force_terminal=color,
        width=sys.maxsize,
        color_system="standard" if color else None,
        no_color=not color,
    )
    console.print(table)
    return buf.getvalue().rstrip()


def render_decorations(
    uri: str,
    coverage: Mapping[int, LineCoverage],
    decorations: Sequence[LineDecoration],
    *,
    color: bool,
) -> str:
    """Render one row per decorated line."""
    if not decorations:
        return f"{uri}: no coverage decorations"
    table = Table(title=uri, box=box.SIMPLE_HEAVY, header_style="bold")
    table.add_column("Line", justify="right")
    table.add_column("Kind")
    table.add_column("Hits", justify="right")
    table.add_column("Background")
    table.add_column("Annotation")
    for deco in decorations:
        cov = coverage[deco.line]
        table.add_row(
            str(deco.line),
            str(cov.kind),
            cov.label(),
            deco.background_color or "",
            deco.after.content if deco.after else "",
        )
    return _render_table(table, color=color)


def render_ratios(commit_ratio: float | None, ratios: Mapping[str, float], *, color: bool) -> str:
    table = Table(title="Coverage by file", box=box.SIMPLE_HEAVY, header_style="bold")
    table.add_column("File", style="cyan", overflow="fold")
    table.add_column("Cov.", justify="right")
    for path in sorted(ratios):
        table.add_row(path, _style_percent(ratios[path]))
    table.add_section()
    table.add_row("[bold]Commit[/bold]", _style_percent(commit_ratio))
    return _render_table(table, color=color)


def render_json(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


__all__ = ["render_decorations", "render_json", "render_ratios"]
