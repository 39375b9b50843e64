"""Conversion of per-line coverage into editor line decorations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from coverlay.core.config import GREEN_HUE, RED_HUE
from coverlay.core.model import LineKind

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping

    from coverlay.core.model import LineCoverage
    from coverlay.core.settings import Settings

LINE_LIGHTNESS = 0.7
LINE_ALPHA = 0.25
TEXT_LIGHTNESS = 0.25


def hsla(hue: float, lightness: float, alpha: float) -> str:
    return f"hsla({hue:g}, 100%, {lightness * 100:g}%, {alpha:g})"


def hue_for(signal: float) -> float:
    """Interpolate between red (0.0) and green (1.0)."""
    signal = min(max(signal, 0.0), 1.0)
    return RED_HUE + signal * (GREEN_HUE - RED_HUE)


def coverage_color(ratio: float, *, lightness: float = 0.25, alpha: float = 1.0) -> str:
    """Color for a 0-100 coverage ratio, as shown next to a file or commit."""
    return hsla(hue_for(ratio / 100), lightness, alpha)


def coverage_signal(coverage: LineCoverage) -> float | None:
    """Return how covered a line is in ``[0, 1]``, or ``None`` when unknown."""
    if coverage.kind is LineKind.BRANCH:
        total = coverage.hits + coverage.branches
        if total == 0:
            return None
        return coverage.hits / total
    if coverage.kind is LineKind.STATEMENT:
        return 1.0 if coverage.hits > 0 else 0.0
    return None


@dataclass(frozen=True, slots=True)
class DecorationText:
    content: str
    color: str | None = None
    background_color: str | None = None


@dataclass(frozen=True, slots=True)
class LineDecoration:
    line: int  # 1-based
    background_color: str | None = None
    after: DecorationText | None = None

    def to_wire(self) -> dict[str, Any]:
        """Return the host's whole-line decoration form (0-based range)."""
        zero_based = self.line - 1
        wire: dict[str, Any] = {
            "range": {
                "start": {"line": zero_based, "character": 0},
                "end": {"line": zero_based, "character": 0},
            },
            "isWholeLine": True,
        }
        if self.background_color is not None:
            wire["backgroundColor"] = self.background_color
        if self.after is not None:
            after: dict[str, Any] = {"contentText": f" {self.after.content} "}
            if self.after.color is not None:
                after["color"] = self.after.color
            if self.after.background_color is not None:
                after["backgroundColor"] = self.after.background_color
            wire["after"] = after
        return wire


def _line_decoration(settings: Settings, line: int, coverage: LineCoverage) -> LineDecoration | None:
    signal = coverage_signal(coverage)
    hue = hue_for(signal) if signal is not None else None

    background = None
    if settings.show_line_coverage and hue is not None:
        background = hsla(hue, LINE_LIGHTNESS, LINE_ALPHA)

    after = None
    if settings.show_line_hit_counts:
        after = DecorationText(
            content=coverage.label(),
            color=hsla(hue, TEXT_LIGHTNESS, 1) if hue is not None else None,
            background_color=hsla(hue, LINE_LIGHTNESS, 1) if hue is not None else None,
        )

    if background is None and after is None:
        return None
    return LineDecoration(line=line, background_color=background, after=after)


def to_decorations(settings: Settings, coverage: Mapping[int, LineCoverage]) -> list[LineDecoration]:
    """Return decorations for every line with coverage data, in line order."""
    decorations: list[LineDecoration] = []
    for line in sorted(coverage):
        value = coverage[line]
        if not value.has_data:
            continue
        decoration = _line_decoration(settings, line, value)
        if decoration is not None:
            decorations.append(decoration)
    return decorations


__all__ = [
    "DecorationText",
    "LineDecoration",
    "coverage_color",
    "coverage_signal",
    "hsla",
    "hue_for",
    "to_decorations",
]
