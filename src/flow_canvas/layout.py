"""
Two-column layout for Flow-Canvas.

Turns per-entity totals into stacked node geometry:

  1. Sort each column by total, descending (stable, so ties keep their
     first-encounter order).
  2. Size the canvas from the busier column: every node needs at least
     ``min_node_height + node_gap`` plus a fixed ``flex_space`` for
     proportional growth, and the canvas never drops below
     ``min_canvas_height``.
  3. Give each node ``total / flow * usable * NODE_FILL_RATIO`` of height,
     floored at ``min_node_height``.  The 0.8 ratio leaves 20% slack so the
     floor rarely pushes a column past its stack area.
  4. Stack nodes top-down, each followed by ``node_gap``.

Source nodes sit at the left padding, target nodes flush against the right
padding.

Spacing constants (canvas units):
  - Canvas: 800 wide, at least 400 tall
  - Padding 40 around the stack area, plus a 20 top margin for the title
  - Nodes: 20 wide, at least 32 tall, 10 apart
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .aggregate import safe_total
from .models import Column, FlowLayout, FlowNode
from .names import NameResolver, resolve_display_name
from .themes import FlowTheme, get_theme

logger = logging.getLogger(__name__)


# --- Spacing constants ---

CANVAS_WIDTH = 800
NODE_WIDTH = 20
PADDING = 40
TOP_MARGIN = 20

NODE_GAP = 10
MIN_NODE_HEIGHT = 32
MIN_LINK_WIDTH = 3

# Room reserved per column for nodes to grow beyond the floor
FLEX_SPACE = 100
MIN_CANVAS_HEIGHT = 400

NODE_FILL_RATIO = 0.8
CURVATURE = 0.5


@dataclass(frozen=True)
class LayoutOptions:
    """Geometry options shared by the layout and routing stages."""
    canvas_width: float = CANVAS_WIDTH
    node_width: float = NODE_WIDTH
    padding: float = PADDING
    top_margin: float = TOP_MARGIN
    node_gap: float = NODE_GAP
    min_node_height: float = MIN_NODE_HEIGHT
    min_link_width: float = MIN_LINK_WIDTH
    flex_space: float = FLEX_SPACE
    min_canvas_height: float = MIN_CANVAS_HEIGHT
    curvature: float = CURVATURE

    @property
    def chrome_height(self) -> float:
        """Vertical space outside the stack area."""
        return 2 * self.padding + self.top_margin

    @property
    def min_internal_height(self) -> float:
        return max(self.min_canvas_height - self.chrome_height, 0)

    @property
    def stack_top(self) -> float:
        return self.padding + self.top_margin

    def column_x(self, column: Column) -> float:
        if column == Column.SOURCE:
            return self.padding
        return self.canvas_width - self.padding - self.node_width


def sort_column(totals: Mapping[str, float]) -> list[tuple[str, float]]:
    """Entries by total descending; equal totals keep their map order."""
    return sorted(totals.items(), key=lambda entry: -entry[1])


def column_requirement(count: int, options: LayoutOptions) -> float:
    """Minimum stack height a column of ``count`` nodes asks for."""
    return count * (options.min_node_height + options.node_gap) + options.flex_space


def internal_height_for(
    source_count: int,
    target_count: int,
    options: LayoutOptions,
) -> float:
    return max(
        column_requirement(source_count, options),
        column_requirement(target_count, options),
        options.min_internal_height,
    )


def _place_column(
    entries: list[tuple[str, float]],
    column: Column,
    internal_height: float,
    total_flow: float,
    color: str,
    options: LayoutOptions,
    resolver: Optional[NameResolver],
) -> list[FlowNode]:
    """Stack one column's nodes top-down."""
    usable = internal_height - len(entries) * options.node_gap
    denominator = safe_total(total_flow)
    x = options.column_x(column)
    current_y = options.stack_top

    nodes: list[FlowNode] = []
    for node_id, value in entries:
        height = max(
            value / denominator * usable * NODE_FILL_RATIO,
            options.min_node_height,
        )
        nodes.append(FlowNode(
            id=node_id,
            display_name=resolve_display_name(resolver, node_id),
            column=column,
            x=x,
            y=current_y,
            width=options.node_width,
            height=height,
            color=color,
            total_value=value,
        ))
        current_y += height + options.node_gap
    return nodes


def _column_extent(nodes: list[FlowNode], options: LayoutOptions) -> float:
    """Height of a placed column including the gap after each node."""
    return sum(n.height + options.node_gap for n in nodes)


def layout(
    source_totals: Mapping[str, float],
    target_totals: Mapping[str, float],
    total_flow: float,
    options: Optional[LayoutOptions] = None,
    theme: Optional[FlowTheme] = None,
    resolver: Optional[NameResolver] = None,
) -> FlowLayout:
    """Place source and target nodes and size the canvas.

    Returns source nodes first (in column order), then target nodes.
    An empty diagram gets no nodes and the minimum canvas height.
    """
    opts = options or LayoutOptions()
    palette = get_theme(theme)

    if not source_totals and not target_totals:
        return FlowLayout(nodes=(), canvas_height=opts.min_canvas_height)

    source_entries = sort_column(source_totals)
    target_entries = sort_column(target_totals)

    internal_height = internal_height_for(len(source_entries), len(target_entries), opts)

    source_nodes = _place_column(
        source_entries, Column.SOURCE, internal_height, total_flow,
        palette.primary, opts, resolver,
    )
    target_nodes = _place_column(
        target_entries, Column.TARGET, internal_height, total_flow,
        palette.secondary, opts, resolver,
    )

    # Floor clamping on many small nodes can overrun the stack area; grow
    # the canvas instead of letting a column spill past the bottom padding.
    extent = max(_column_extent(source_nodes, opts), _column_extent(target_nodes, opts))
    if extent > internal_height:
        logger.debug(f"Column extent {extent:.1f} exceeds stack area {internal_height:.1f}, growing canvas")
        internal_height = extent

    canvas_height = internal_height + opts.chrome_height
    logger.debug(
        f"Laid out {len(source_nodes)} source and {len(target_nodes)} target node(s), "
        f"canvas height {canvas_height:.1f}"
    )
    return FlowLayout(nodes=tuple(source_nodes + target_nodes), canvas_height=canvas_height)
