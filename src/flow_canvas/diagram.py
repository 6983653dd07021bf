"""
The Flow-Canvas pipeline: raw edges in, renderer-ready geometry out.

    edges ─► aggregate ─► layout ─► route ─► FlowDiagram

``build_flow_diagram`` is a pure function of its arguments.  Results are
memoised on the full argument tuple; the cache is an optimisation only and
``clear_diagram_cache`` can drop it at any time without changing results.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Iterable, Optional, Union

from .aggregate import aggregate, coerce_edges
from .layout import LayoutOptions, layout
from .models import FlowDiagram, FlowEdge
from .names import NameResolver
from .routing import route
from .themes import FlowTheme, get_theme

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Pallet Transfer Flow"
CACHE_SIZE = 32


def build_flow_diagram(
    edges: Iterable[Any],
    theme: Union[str, FlowTheme, None] = None,
    resolver: Optional[NameResolver] = None,
    options: Optional[LayoutOptions] = None,
    title: str = DEFAULT_TITLE,
) -> FlowDiagram:
    """Compute the full diagram for a list of edges.

    Args:
        edges:    FlowEdge objects, dicts or ``(source, dest, qty)`` tuples.
        theme:    Theme name or FlowTheme; sources use ``primary``, targets
                  ``secondary``.
        resolver: Callable mapping an entity id to a display name.
        options:  Geometry options (defaults to ``LayoutOptions()``).
        title:    Diagram title passed through to renderers.
    """
    args = (coerce_edges(edges), get_theme(theme), resolver, options or LayoutOptions(), title)
    try:
        hash(resolver)
    except TypeError:
        # e.g. a bound ``dict.get``; compute without the memo
        return _build_cached.__wrapped__(*args)
    return _build_cached(*args)


@lru_cache(maxsize=CACHE_SIZE)
def _build_cached(
    edges: tuple[FlowEdge, ...],
    theme: FlowTheme,
    resolver: Optional[NameResolver],
    options: LayoutOptions,
    title: str,
) -> FlowDiagram:
    totals = aggregate(edges)
    placed = layout(
        totals.source_totals,
        totals.target_totals,
        totals.total_flow,
        options=options,
        theme=theme,
        resolver=resolver,
    )
    links = route(totals.filtered_edges, placed.nodes, totals.source_totals, options)

    logger.info(
        f"Built flow diagram '{title}': {len(placed.nodes)} nodes, "
        f"{len(links)} links, total flow {totals.total_flow:g}"
    )
    return FlowDiagram(
        title=title,
        nodes=placed.nodes,
        links=tuple(links),
        canvas_width=options.canvas_width,
        canvas_height=placed.canvas_height,
        total_flow=totals.total_flow,
        theme=theme.name,
        primary_color=theme.primary,
        secondary_color=theme.secondary,
    )


def clear_diagram_cache() -> None:
    _build_cached.cache_clear()


def diagram_cache_info():
    return _build_cached.cache_info()
