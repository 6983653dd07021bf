"""Flow-Canvas: two-column flow (Sankey) layout, highlighting and rendering."""

from .aggregate import aggregate
from .diagram import build_flow_diagram, clear_diagram_cache
from .highlight import (
    NO_HOVER,
    HighlightIndex,
    HoverState,
    LinkHovered,
    NodeHovered,
    NoHover,
    is_link_highlighted,
    is_node_highlighted,
)
from .layout import LayoutOptions, layout
from .models import Column, FlowDiagram, FlowEdge, FlowLink, FlowNode, FlowTotals
from .names import DirectoryResolver
from .routing import route

__version__ = "0.1.0"
