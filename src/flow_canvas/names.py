"""Display-name resolution for flow entities."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

logger = logging.getLogger(__name__)

NameResolver = Callable[[str], Optional[str]]


class DirectoryResolver:
    """Resolve entity ids through a fixed directory (e.g. the branch list).

    Unknown ids raise ``KeyError``; ``resolve_display_name`` turns that into
    the raw-id fallback.
    """

    def __init__(self, names: Mapping[str, str]):
        self.names = dict(names)

    def __call__(self, node_id: str) -> str:
        return self.names[node_id]

    def __eq__(self, other) -> bool:
        return isinstance(other, DirectoryResolver) and self.names == other.names

    def __hash__(self) -> int:
        return hash(frozenset(self.names.items()))

    def __repr__(self) -> str:
        return f"DirectoryResolver({len(self.names)} names)"


def resolve_display_name(resolver: Optional[NameResolver], node_id: str) -> str:
    """Return the resolver's name for ``node_id``, or ``node_id`` itself.

    Falls back when there is no resolver, when it returns nothing, or when
    the lookup fails with ``LookupError``/``ValueError``.
    """
    if resolver is None:
        return node_id
    try:
        name = resolver(node_id)
    except (LookupError, ValueError) as e:
        logger.debug(f"No display name for {node_id!r}: {e!r}")
        return node_id
    return name if name else node_id
