"""YAML recipe parser for Flow-Canvas.

A recipe describes one flow diagram:

    title: Pallet Transfer Flow
    theme: indigo          # accent pair (indigo, purple, blue, green, rose, amber)
    surface: dark          # dark or light
    names:                 # optional directory: id -> display name
      hub_nks: Hub
      cm: Chiang Mai
    edges:                 # mappings or [source, dest, qty] lists
      - {source: hub_nks, dest: cm, qty: 120}
      - [hub_nks, kpp, 40]
    options:               # optional LayoutOptions overrides
      canvas_width: 900
"""

from __future__ import annotations
from dataclasses import fields
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

from .aggregate import coerce_edge
from .diagram import DEFAULT_TITLE, build_flow_diagram
from .layout import LayoutOptions
from .models import FlowDiagram, FlowEdge
from .names import DirectoryResolver

OPTION_NAMES = {f.name for f in fields(LayoutOptions)}


class FlowRecipe(BaseModel):
    """A parsed recipe: edges plus everything needed to lay them out."""
    title: str = DEFAULT_TITLE
    theme: str = "indigo"
    surface: str = "dark"
    names: dict[str, str] = Field(default_factory=dict)
    edges: list[FlowEdge] = Field(default_factory=list)
    options: dict[str, float] = Field(default_factory=dict)

    def layout_options(self) -> LayoutOptions:
        return LayoutOptions(**self.options)

    def resolver(self) -> Optional[DirectoryResolver]:
        return DirectoryResolver(self.names) if self.names else None

    def build(self) -> FlowDiagram:
        """Run the layout pipeline for this recipe."""
        return build_flow_diagram(
            self.edges,
            theme=self.theme,
            resolver=self.resolver(),
            options=self.layout_options(),
            title=self.title,
        )


def parse_yaml(yaml_str: str) -> FlowRecipe:
    """Parse a YAML string into a FlowRecipe."""
    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML: {e}") from e
    if not data:
        raise ValueError("Empty YAML input")
    if not isinstance(data, dict):
        raise ValueError("YAML recipe must be a mapping")
    return parse_dict(data)


def parse_file(path: str) -> FlowRecipe:
    """Parse a YAML file into a FlowRecipe."""
    content = Path(path).read_text()
    return parse_yaml(content)


def parse_dict(data: dict) -> FlowRecipe:
    """Build a FlowRecipe from already-loaded data (YAML or JSON)."""
    if not isinstance(data, dict):
        raise ValueError("Flow recipe must be a mapping")
    names = data.get("names") or {}
    if not isinstance(names, dict):
        raise ValueError("'names' must be a mapping of id to display name")
    edges = data.get("edges") or []
    if not isinstance(edges, list):
        raise ValueError("'edges' must be a list")
    options = data.get("options") or {}
    if not isinstance(options, dict):
        raise ValueError("'options' must be a mapping of option name to value")
    unknown = set(options) - OPTION_NAMES
    if unknown:
        valid = ", ".join(sorted(OPTION_NAMES))
        raise ValueError(f"Unknown layout option(s): {', '.join(sorted(unknown))}. Valid options: {valid}")

    return FlowRecipe(
        title=data.get("title", DEFAULT_TITLE),
        theme=data.get("theme", "indigo"),
        surface=data.get("surface", "dark"),
        names={str(k): str(v) for k, v in names.items()},
        edges=[_parse_edge(e) for e in edges],
        options={k: float(v) for k, v in options.items()},
    )


def _parse_edge(data: Any) -> FlowEdge:
    """Parse a single edge from a mapping or a 3-item list."""
    try:
        return coerce_edge(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid edge {data!r}: expected source, dest, qty") from e


def recipe_to_yaml(recipe: FlowRecipe) -> str:
    """Serialize a FlowRecipe back to YAML."""
    data: dict[str, Any] = {
        "title": recipe.title,
        "theme": recipe.theme,
        "surface": recipe.surface,
    }
    if recipe.names:
        data["names"] = dict(recipe.names)
    data["edges"] = [
        {"source": e.source, "dest": e.dest, "qty": e.qty}
        for e in recipe.edges
    ]
    if recipe.options:
        data["options"] = dict(recipe.options)

    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
