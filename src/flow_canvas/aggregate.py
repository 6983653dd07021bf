"""Edge cleaning and per-node totals for Flow-Canvas."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .models import FlowEdge, FlowTotals

logger = logging.getLogger(__name__)


def safe_total(value: float) -> float:
    """Denominator guard for proportion math.

    Kept separate from the displayed ``total_flow``: an empty diagram shows a
    total of 0, while every division uses at least 1.
    """
    return max(value, 1)


def coerce_edge(raw: Any) -> FlowEdge:
    """Accept a FlowEdge, a mapping or a ``(source, dest, qty)`` sequence."""
    if isinstance(raw, FlowEdge):
        return raw
    if isinstance(raw, dict):
        return FlowEdge(
            source=str(raw["source"]),
            dest=str(raw["dest"]),
            qty=float(raw.get("qty", 0)),
        )
    source, dest, qty = raw
    return FlowEdge(source=str(source), dest=str(dest), qty=float(qty))


def coerce_edges(raw_edges: Iterable[Any]) -> tuple[FlowEdge, ...]:
    return tuple(coerce_edge(raw) for raw in raw_edges)


def is_flow(edge: FlowEdge) -> bool:
    """An edge contributes to the diagram only if it moves a positive amount
    between two different entities."""
    return edge.source != edge.dest and edge.qty > 0


def aggregate(edges: Iterable[FlowEdge]) -> FlowTotals:
    """Drop self loops and non-positive rows, then total each column.

    Returns a ``FlowTotals`` whose maps preserve first-encounter order.
    """
    filtered: list[FlowEdge] = []
    dropped = 0
    source_totals: dict[str, float] = {}
    target_totals: dict[str, float] = {}

    for edge in edges:
        if not is_flow(edge):
            dropped += 1
            continue
        filtered.append(edge)
        source_totals[edge.source] = source_totals.get(edge.source, 0) + edge.qty
        target_totals[edge.dest] = target_totals.get(edge.dest, 0) + edge.qty

    if dropped:
        logger.debug(f"Dropped {dropped} edge(s): self loops or non-positive quantity")

    total_flow = sum(source_totals.values()) if filtered else 0

    return FlowTotals(
        source_totals=source_totals,
        target_totals=target_totals,
        total_flow=total_flow,
        filtered_edges=tuple(filtered),
    )
