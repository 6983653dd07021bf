"""
Hover highlighting for Flow-Canvas.

The renderer owns the hover state and updates it on pointer enter/leave.
This module only answers the question "is this link / node highlighted
under that state?".  With nothing hovered, everything is highlighted.

Hover states:

    NoHover            — pointer over empty canvas
    LinkHovered(link)  — pointer over one link
    NodeHovered(id)    — pointer over a node; the id is the base entity id,
                         so the entity lights up in both columns
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .models import FlowLink, FlowNode


@dataclass(frozen=True)
class NoHover:
    pass


@dataclass(frozen=True)
class LinkHovered:
    link: FlowLink


@dataclass(frozen=True)
class NodeHovered:
    node_id: str


HoverState = Union[NoHover, LinkHovered, NodeHovered]

NO_HOVER = NoHover()


def is_link_highlighted(link: FlowLink, state: HoverState) -> bool:
    if isinstance(state, NoHover):
        return True
    if isinstance(state, LinkHovered):
        return state.link == link
    if isinstance(state, NodeHovered):
        return link.touches(state.node_id)
    return False


def is_node_highlighted(node: FlowNode, state: HoverState) -> bool:
    if isinstance(state, NoHover):
        return True
    if isinstance(state, NodeHovered):
        return node.id == state.node_id
    if isinstance(state, LinkHovered):
        return state.link.touches(node.id)
    return False


class HighlightIndex:
    """Hover state plus the links it is queried against.

    Transitions are synchronous and idempotent; each returns True only when
    the state actually changed, so a renderer can skip redundant redraws.
    """

    def __init__(self, links: Sequence[FlowLink], state: HoverState = NO_HOVER):
        self.links = tuple(links)
        self.state: HoverState = state

    def _set(self, state: HoverState) -> bool:
        if state == self.state:
            return False
        self.state = state
        return True

    def enter_link(self, link: FlowLink) -> bool:
        return self._set(LinkHovered(link))

    def enter_node(self, node_id: str) -> bool:
        return self._set(NodeHovered(node_id))

    def leave(self) -> bool:
        return self._set(NO_HOVER)

    def is_link_highlighted(self, link: FlowLink) -> bool:
        return is_link_highlighted(link, self.state)

    def is_node_highlighted(self, node: FlowNode) -> bool:
        return is_node_highlighted(node, self.state)

    def highlighted_links(self) -> list[FlowLink]:
        return [link for link in self.links if is_link_highlighted(link, self.state)]

    def highlighted_nodes(self, nodes: Iterable[FlowNode]) -> list[FlowNode]:
        return [node for node in nodes if is_node_highlighted(node, self.state)]

    @property
    def active(self) -> bool:
        """True while something is hovered."""
        return not isinstance(self.state, NoHover)


# --- JSON mapping for remote renderers ---

def hover_state_to_dict(state: HoverState) -> dict:
    """Serialize a hover state; links are referenced by routing index."""
    if isinstance(state, LinkHovered):
        return {"kind": "link", "index": state.link.index}
    if isinstance(state, NodeHovered):
        return {"kind": "node", "id": state.node_id}
    return {"kind": "none"}


def hover_state_from_dict(data: Optional[dict], links: Sequence[FlowLink]) -> HoverState:
    """Inverse of ``hover_state_to_dict``.

    Raises:
        ValueError: For an unknown kind or a link index outside ``links``.
    """
    if not data:
        return NO_HOVER
    kind = data.get("kind", "none")
    if kind == "none":
        return NO_HOVER
    if kind == "node":
        return NodeHovered(str(data["id"]))
    if kind == "link":
        index = int(data["index"])
        for link in links:
            if link.index == index:
                return LinkHovered(link)
        raise ValueError(f"No link with index {index}")
    raise ValueError(f"Unknown hover kind '{kind}'. Valid kinds: none, link, node")
