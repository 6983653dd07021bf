"""Tests for layout.py — column ordering, node sizing, canvas height growth."""

from __future__ import annotations

import pytest

from flow_canvas.aggregate import aggregate
from flow_canvas.layout import (
    CANVAS_WIDTH,
    MIN_CANVAS_HEIGHT,
    MIN_NODE_HEIGHT,
    NODE_GAP,
    NODE_WIDTH,
    PADDING,
    TOP_MARGIN,
    LayoutOptions,
    column_requirement,
    layout,
    sort_column,
)
from flow_canvas.models import Column, FlowEdge
from flow_canvas.names import DirectoryResolver
from flow_canvas.themes import get_theme


def run_layout(*rows: tuple[str, str, float], **kwargs):
    totals = aggregate(FlowEdge(source=s, dest=d, qty=q) for s, d, q in rows)
    return layout(totals.source_totals, totals.target_totals, totals.total_flow, **kwargs)


def test_scenario_a_ordering_and_geometry():
    result = run_layout(("A", "X", 10), ("A", "Y", 30), ("B", "X", 20))
    sources = result.nodes_in(Column.SOURCE)
    targets = result.nodes_in(Column.TARGET)

    assert [n.id for n in sources] == ["A", "B"]
    # X and Y tie at 30: encounter order is kept
    assert [n.id for n in targets] == ["X", "Y"]

    assert result.canvas_height == MIN_CANVAS_HEIGHT
    # internal 300, usable 280
    assert sources[0].height == pytest.approx(40 / 60 * 280 * 0.8)
    assert sources[1].height == pytest.approx(20 / 60 * 280 * 0.8)
    assert targets[0].height == pytest.approx(112)
    assert targets[1].height == pytest.approx(112)


def test_nodes_stack_top_down_with_gaps():
    result = run_layout(("A", "X", 10), ("A", "Y", 30), ("B", "X", 20))
    a, b = result.nodes_in(Column.SOURCE)
    assert a.y == PADDING + TOP_MARGIN
    assert b.y == pytest.approx(a.y + a.height + NODE_GAP)


def test_column_x_positions():
    result = run_layout(("A", "X", 1))
    (source,) = result.nodes_in(Column.SOURCE)
    (target,) = result.nodes_in(Column.TARGET)
    assert source.x == PADDING
    assert target.x == CANVAS_WIDTH - PADDING - NODE_WIDTH
    assert source.width == NODE_WIDTH


def test_scenario_b_empty_layout():
    result = run_layout(("A", "A", 5))
    assert result.nodes == ()
    assert result.canvas_height == MIN_CANVAS_HEIGHT


def test_heights_non_increasing_within_column():
    result = run_layout(
        ("A", "X", 50), ("B", "X", 5), ("C", "Y", 20), ("D", "Z", 1), ("E", "Y", 12),
    )
    for column in Column:
        heights = [n.height for n in result.nodes_in(column)]
        assert heights == sorted(heights, reverse=True)
        totals = [n.total_value for n in result.nodes_in(column)]
        assert totals == sorted(totals, reverse=True)


def test_min_node_height_floor():
    result = run_layout(("A", "X", 1000), ("B", "Y", 1))
    assert all(n.height >= MIN_NODE_HEIGHT for n in result.nodes)
    small = [n for n in result.nodes if n.total_value == 1]
    assert all(n.height == MIN_NODE_HEIGHT for n in small)


def test_scenario_d_height_grows_with_entity_count():
    heights = []
    for count in range(5, 12):
        rows = [(f"S{i}", "T", 1) for i in range(count)]
        heights.append(run_layout(*rows).canvas_height)
    assert all(later > earlier for earlier, later in zip(heights, heights[1:]))


def test_height_follows_requirement_above_minimum():
    rows = [(f"S{i}", "T", 1) for i in range(8)]
    result = run_layout(*rows)
    opts = LayoutOptions()
    assert result.canvas_height == pytest.approx(column_requirement(8, opts) + opts.chrome_height)


def test_columns_never_overrun_stack_area():
    rows = [("BIG", "T", 1000)] + [(f"S{i}", "T", 1) for i in range(9)]
    result = run_layout(*rows)
    bottom = max(n.bottom for n in result.nodes)
    assert bottom + NODE_GAP <= result.canvas_height - PADDING + 1e-9
    # grew past the plain requirement
    assert result.canvas_height > column_requirement(10, LayoutOptions()) + LayoutOptions().chrome_height


def test_theme_colors_per_column():
    theme = get_theme("green")
    result = run_layout(("A", "X", 1), theme=theme)
    colors = {n.column: n.color for n in result.nodes}
    assert colors == {Column.SOURCE: theme.primary, Column.TARGET: theme.secondary}


def test_display_names_resolve_with_fallback():
    resolver = DirectoryResolver({"A": "Hub"})
    result = run_layout(("A", "X", 1), resolver=resolver)
    names = {n.id: n.display_name for n in result.nodes}
    assert names == {"A": "Hub", "X": "X"}


def test_same_entity_in_both_columns_has_same_id():
    result = run_layout(("A", "B", 5), ("B", "C", 5))
    b_nodes = [n for n in result.nodes if n.id == "B"]
    assert {n.column for n in b_nodes} == {Column.SOURCE, Column.TARGET}
    assert len({n.key for n in b_nodes}) == 2


def test_custom_options():
    opts = LayoutOptions(canvas_width=1000, node_width=30, min_canvas_height=500)
    result = run_layout(("A", "X", 1), options=opts)
    (target,) = result.nodes_in(Column.TARGET)
    assert target.x == 1000 - PADDING - 30
    assert result.canvas_height == 500


def test_sort_column_is_stable():
    assert sort_column({"b": 2, "a": 5, "c": 2}) == [("a", 5), ("b", 2), ("c", 2)]
