"""
Theme definitions for Flow-Canvas.

Two independent palettes drive a rendered diagram:

- ``FlowTheme`` — the two-tone accent pair.  Source-column nodes and links
  use ``primary``; target-column nodes use ``secondary``.
- ``SurfacePalette`` — dark or light chrome: background, title, labels,
  captions.

Only ``FlowTheme`` reaches the layout engine (it colours nodes and links).
The surface is a rendering concern.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class FlowTheme:
    """Two-tone accent palette for a flow diagram."""

    name: str
    primary: str
    secondary: str
    accent: Optional[str] = None
    label: str = ""

    def get_label(self) -> str:
        return self.label if self.label else self.name


@dataclass(frozen=True)
class SurfacePalette:
    """Color palette for the diagram surface."""

    # Canvas
    background: str

    # Text
    title_color: str
    label_color: str
    value_color: str
    caption_color: str

    # Link and dimming opacity (0-255)
    link_alpha: int
    link_highlight_alpha: int
    dimmed_alpha: int


FLOW_THEMES: dict[str, FlowTheme] = {
    "indigo": FlowTheme("indigo", "#6366f1", "#818cf8", "#4f46e5", "Classic Indigo"),
    "purple": FlowTheme("purple", "#a855f7", "#c084fc", "#9333ea", "Royal Purple"),
    "blue":   FlowTheme("blue",   "#3b82f6", "#60a5fa", "#2563eb", "Ocean Blue"),
    "green":  FlowTheme("green",  "#10b981", "#34d399", "#059669", "Forest Green"),
    "rose":   FlowTheme("rose",   "#f43f5e", "#fb7185", "#e11d48", "Rose Pink"),
    "amber":  FlowTheme("amber",  "#f59e0b", "#fbbf24", "#d97706", "Sunset Amber"),
}

DEFAULT_THEME = "indigo"


# Slate dark surface
DARK_SURFACE = SurfacePalette(
    background="#0f172a",
    title_color="#ffffff",
    label_color="#94a3b8",
    value_color="#64748b",
    caption_color="#475569",
    link_alpha=102,            # 0.4
    link_highlight_alpha=204,  # 0.8
    dimmed_alpha=26,           # 0.1
)


# Light surface - white background with slate text
LIGHT_SURFACE = SurfacePalette(
    background="#ffffff",
    title_color="#1e293b",
    label_color="#475569",
    value_color="#94a3b8",
    caption_color="#cbd5e1",
    link_alpha=102,
    link_highlight_alpha=204,
    dimmed_alpha=26,
)


SURFACES: dict[str, SurfacePalette] = {
    "dark": DARK_SURFACE,
    "light": LIGHT_SURFACE,
}


def get_theme(theme: Union[str, FlowTheme, None]) -> FlowTheme:
    """Resolve a theme by name (or pass a FlowTheme through).

    Raises:
        ValueError: If theme name is not recognized
    """
    if isinstance(theme, FlowTheme):
        return theme
    name = theme or DEFAULT_THEME
    if name not in FLOW_THEMES:
        valid = ", ".join(FLOW_THEMES.keys())
        raise ValueError(f"Unknown theme '{name}'. Valid themes: {valid}")
    return FLOW_THEMES[name]


def get_surface(name: str) -> SurfacePalette:
    """Get a surface palette by name ("dark" or "light").

    Raises:
        ValueError: If surface name is not recognized
    """
    if name not in SURFACES:
        valid = ", ".join(SURFACES.keys())
        raise ValueError(f"Unknown surface '{name}'. Valid surfaces: {valid}")
    return SURFACES[name]
