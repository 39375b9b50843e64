from __future__ import annotations

from coverlay.core import Settings
from coverlay.core.decorations import (
    DecorationText,
    LineDecoration,
    coverage_color,
    coverage_signal,
    to_decorations,
)
from coverlay.core.model import NO_DATA, LineCoverage

GREEN = "hsla(120, 100%, 70%, 0.25)"
RED = "hsla(0, 100%, 70%, 0.25)"
YELLOW = "hsla(60, 100%, 70%, 0.25)"

COLORS_ONLY = Settings(show_line_coverage=True, show_line_hit_counts=False)
COUNTS_ONLY = Settings(show_line_coverage=False, show_line_hit_counts=True)


def test_null_lines_get_no_decoration() -> None:
    assert to_decorations(COLORS_ONLY, {12: NO_DATA}) == []


def test_statement_lines_are_green_or_red() -> None:
    decos = to_decorations(COLORS_ONLY, {1: LineCoverage.statement(4), 2: LineCoverage.statement(0)})
    assert decos == [
        LineDecoration(line=1, background_color=GREEN),
        LineDecoration(line=2, background_color=RED),
    ]


def test_branch_ratio_interpolates_hue() -> None:
    (deco,) = to_decorations(COLORS_ONLY, {7: LineCoverage.branch(2, 2)})
    assert deco.background_color == YELLOW
    assert coverage_signal(LineCoverage.branch(1, 3)) == 0.25


def test_zero_branch_total_has_no_signal() -> None:
    empty = LineCoverage.branch(0, 0)
    assert coverage_signal(empty) is None
    assert to_decorations(COLORS_ONLY, {3: empty}) == []

    (deco,) = to_decorations(COUNTS_ONLY, {3: empty})
    assert deco.background_color is None
    assert deco.after == DecorationText(content="0/0")


def test_decorations_are_in_line_order() -> None:
    coverage = {30: LineCoverage.statement(1), 4: LineCoverage.statement(0), 12: LineCoverage.branch(1, 1)}
    assert [d.line for d in to_decorations(COLORS_ONLY, coverage)] == [4, 12, 30]


def test_hit_counts_annotation() -> None:
    settings = Settings(show_line_coverage=True, show_line_hit_counts=True)
    decos = to_decorations(settings, {1: LineCoverage.statement(3), 2: LineCoverage.branch(2, 4)})
    assert [d.after.content for d in decos if d.after] == ["3", "2/4"]
    assert decos[0].after == DecorationText(
        content="3",
        color="hsla(120, 100%, 25%, 1)",
        background_color="hsla(120, 100%, 70%, 1)",
    )


def test_everything_off_yields_nothing() -> None:
    settings = Settings(show_line_coverage=False, show_line_hit_counts=False)
    assert to_decorations(settings, {1: LineCoverage.statement(3)}) == []


def test_wire_form_is_zero_based_whole_line() -> None:
    deco = LineDecoration(line=12, background_color=GREEN, after=DecorationText(content="3", color="c"))
    assert deco.to_wire() == {
        "range": {"start": {"line": 11, "character": 0}, "end": {"line": 11, "character": 0}},
        "isWholeLine": True,
        "backgroundColor": GREEN,
        "after": {"contentText": " 3 ", "color": "c"},
    }


def test_coverage_color_scale() -> None:
    assert coverage_color(100) == "hsla(120, 100%, 25%, 1)"
    assert coverage_color(0) == "hsla(0, 100%, 25%, 1)"
    assert coverage_color(50) == "hsla(60, 100%, 25%, 1)"
