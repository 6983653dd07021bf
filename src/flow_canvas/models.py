"""
Data models for Flow-Canvas — the flow diagram ontology.

A flow diagram is a two-column picture of weighted transfers between
entities (branches, warehouses, partners):

    FlowEdge      — one raw transfer row: source → dest, quantity
    FlowTotals    — per-entity totals for each column, plus the cleaned edges
    FlowNode      — one entity placed in one column (source or target)
    FlowLink      — one routed edge, a stacked cubic Bezier band
    FlowDiagram   — the complete geometry handed to a renderer

The same entity id may appear once in each column.  Instead of encoding the
column into the id, every node carries an explicit ``column`` tag, so "same
entity in both columns" is a comparison of ``id`` fields.

All derived models are frozen: each recomputation produces new objects and
nothing computed earlier is mutated afterwards.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class FlowEdge(BaseModel):
    """A directed, weighted transfer from one entity to another.

    Edges are accepted as-is: duplicates, self loops and non-positive
    quantities are valid input.  Cleaning happens in ``aggregate``.
    """
    model_config = ConfigDict(frozen=True)

    source: str
    dest: str
    qty: float


# ---------------------------------------------------------------------------
# Derived geometry
# ---------------------------------------------------------------------------

class Column(str, Enum):
    """Which side of the diagram a node is drawn on."""
    SOURCE = "source"
    TARGET = "target"


class FlowNode(BaseModel):
    """An entity placed in one column.

    Attributes:
        id:           Base entity id, shared by both columns.
        display_name: Human-readable name (falls back to ``id``).
        column:       ``Column.SOURCE`` (left) or ``Column.TARGET`` (right).
        x, y:         Top-left corner in canvas coordinates.
        width:        Bar width (constant across the diagram).
        height:       Bar height, never below the minimum node height.
        color:        Fill color taken from the theme.
        total_value:  Sum of quantities incident to this entity in this column.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    column: Column
    x: float
    y: float
    width: float
    height: float
    color: str
    total_value: float

    @property
    def key(self) -> tuple[str, Column]:
        """Unique node key: the entity id together with its column."""
        return (self.id, self.column)

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2


class FlowLink(BaseModel):
    """A routed edge between a source node and a target node.

    The band is described by its centre line, a horizontal S-curve, and its
    ``width``.  ``index`` is the position in routing order; it makes every
    link distinct even when two input rows carry identical values, so link
    equality behaves as identity.
    """
    model_config = ConfigDict(frozen=True)

    index: int
    source_id: str
    target_id: str
    value: float
    width: float
    path: str
    source_x: float
    target_x: float
    source_anchor_y: float
    target_anchor_y: float
    color: str
    curvature: float = 0.5

    def control_points(self) -> list[tuple[float, float]]:
        """Return the four cubic Bezier points (start, c1, c2, end)."""
        span = self.target_x - self.source_x
        c1x = self.source_x + self.curvature * span
        c2x = self.target_x - self.curvature * span
        return [
            (self.source_x, self.source_anchor_y),
            (c1x, self.source_anchor_y),
            (c2x, self.target_anchor_y),
            (self.target_x, self.target_anchor_y),
        ]

    def touches(self, node_id: str) -> bool:
        """True if ``node_id`` is this link's source or target entity."""
        return node_id == self.source_id or node_id == self.target_id


class FlowTotals(BaseModel):
    """Output of the aggregation stage.

    ``source_totals`` and ``target_totals`` keep first-encounter order; the
    layout stage relies on that order to break ties between equal totals.
    ``total_flow`` is the displayed total and is 0 for an empty edge set.
    """
    model_config = ConfigDict(frozen=True)

    source_totals: dict[str, float] = Field(default_factory=dict)
    target_totals: dict[str, float] = Field(default_factory=dict)
    total_flow: float = 0.0
    filtered_edges: tuple[FlowEdge, ...] = ()


class FlowLayout(BaseModel):
    """Output of the layout stage: placed nodes and the canvas height."""
    model_config = ConfigDict(frozen=True)

    nodes: tuple[FlowNode, ...] = ()
    canvas_height: float

    def nodes_in(self, column: Column) -> list[FlowNode]:
        return [n for n in self.nodes if n.column == column]


class FlowDiagram(BaseModel):
    """The complete renderer-facing geometry of a flow diagram.

    Renderers draw ``links`` first (behind) and ``nodes`` on top.  Hover
    state is not part of the diagram; it is owned by whoever renders it and
    queried through ``flow_canvas.highlight``.
    """
    model_config = ConfigDict(frozen=True)

    title: str = "Pallet Transfer Flow"
    nodes: tuple[FlowNode, ...] = ()
    links: tuple[FlowLink, ...] = ()
    canvas_width: float
    canvas_height: float
    total_flow: float = 0.0
    theme: str = "indigo"
    primary_color: str = "#6366f1"
    secondary_color: str = "#818cf8"
    source_caption: str = "Shipping Point"
    target_caption: str = "Receiving Point"

    def get_node(self, node_id: str, column: Column) -> Optional[FlowNode]:
        """Look up a node by entity id and column."""
        for node in self.nodes:
            if node.id == node_id and node.column == column:
                return node
        return None

    def nodes_in(self, column: Column) -> list[FlowNode]:
        return [n for n in self.nodes if n.column == column]

    def links_for(self, node_id: str) -> list[FlowLink]:
        """Return every link whose source or target entity is ``node_id``."""
        return [link for link in self.links if link.touches(node_id)]
