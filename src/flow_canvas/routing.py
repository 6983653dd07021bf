"""
Link routing for Flow-Canvas.

Every surviving edge becomes one link: a band whose centre line is a
horizontal S-curve from the right edge of its source node to the left edge
of its target node.  Links are never merged or reordered.

Stacking
--------
Links leaving one source node stack top-down in input order, tracked by a
running source offset.  Links arriving at a target node stack the same way,
tracked by a running offset per target entity that is shared by every
source feeding it.  Source nodes are visited in layout order, so the target
stacking order follows the source column from top to bottom.

Width
-----
A link is as thick as its share of the source node:
``qty / source_total * source_height``, never thinner than
``min_link_width``.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from .aggregate import safe_total
from .layout import LayoutOptions
from .models import Column, FlowEdge, FlowLink, FlowNode

logger = logging.getLogger(__name__)


def _fmt(value: float) -> str:
    """Compact number formatting for SVG path data."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def bezier_path(
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    curvature: float = 0.5,
) -> str:
    """SVG path for a horizontal S-curve from (x0, y0) to (x1, y1).

    The control points sit at the endpoints' heights, offset horizontally by
    ``curvature`` of the span, so the curve leaves and enters level.
    """
    span = x1 - x0
    c1x = x0 + curvature * span
    c2x = x1 - curvature * span
    return (
        f"M{_fmt(x0)},{_fmt(y0)} "
        f"C{_fmt(c1x)},{_fmt(y0)} {_fmt(c2x)},{_fmt(y1)} {_fmt(x1)},{_fmt(y1)}"
    )


def link_width(qty: float, source_total: float, source_height: float, min_width: float) -> float:
    return max(qty / safe_total(source_total) * source_height, min_width)


def route(
    filtered_edges: Iterable[FlowEdge],
    nodes: Iterable[FlowNode],
    source_totals: Mapping[str, float],
    options: Optional[LayoutOptions] = None,
) -> list[FlowLink]:
    """Route each edge into a stacked link anchored to its nodes.

    Edges whose source or target node is missing from ``nodes`` are skipped.
    """
    opts = options or LayoutOptions()
    edges = list(filtered_edges)
    node_list = list(nodes)

    source_nodes = [n for n in node_list if n.column == Column.SOURCE]
    target_map: dict[str, FlowNode] = {
        n.id: n for n in node_list if n.column == Column.TARGET
    }

    outgoing: dict[str, list[FlowEdge]] = {}
    for edge in edges:
        outgoing.setdefault(edge.source, []).append(edge)

    target_offsets: dict[str, float] = {}
    links: list[FlowLink] = []
    skipped = 0

    for source_node in source_nodes:
        source_offset = 0.0
        source_total = source_totals.get(source_node.id, 0)

        for edge in outgoing.get(source_node.id, []):
            target_node = target_map.get(edge.dest)
            if target_node is None:
                skipped += 1
                continue

            width = link_width(edge.qty, source_total, source_node.height, opts.min_link_width)
            target_offset = target_offsets.get(edge.dest, 0.0)

            x0 = source_node.x + opts.node_width
            y0 = source_node.y + source_offset + width / 2
            x1 = target_node.x
            y1 = target_node.y + target_offset + width / 2

            links.append(FlowLink(
                index=len(links),
                source_id=source_node.id,
                target_id=target_node.id,
                value=edge.qty,
                width=width,
                path=bezier_path(x0, y0, x1, y1, opts.curvature),
                source_x=x0,
                target_x=x1,
                source_anchor_y=y0,
                target_anchor_y=y1,
                color=source_node.color,
                curvature=opts.curvature,
            ))

            source_offset += width
            target_offsets[edge.dest] = target_offset + width

    routed_sources = {n.id for n in source_nodes}
    skipped += sum(1 for e in edges if e.source not in routed_sources)
    if skipped:
        logger.warning(f"Skipped {skipped} edge(s) with no matching node")

    return links
