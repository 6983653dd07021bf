"""Flow diagram renderers — Pillow PNG output and a standalone SVG export.

Both renderers draw a ``FlowDiagram`` exactly as laid out; they never move
geometry.  A hover state may be passed in to draw a highlighted frame:
highlighted links get the strong opacity, everything else is dimmed.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from .highlight import NO_HOVER, HoverState, NoHover, is_link_highlighted, is_node_highlighted
from .models import Column, FlowDiagram, FlowLink, FlowNode
from .themes import SurfacePalette, get_surface

logger = logging.getLogger(__name__)


# --- Font handling ---

def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a font, falling back to default if none available."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return ImageFont.load_default()


def _load_bold_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a bold font, falling back to regular."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSansBold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return _load_font(size)


# --- Color helpers ---

def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert hex color to RGB tuple. Supports both 3-char and 6-char hex."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = hex_color[0]*2 + hex_color[1]*2 + hex_color[2]*2
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def _hex_to_rgba(hex_color: str, alpha: int = 255) -> tuple[int, int, int, int]:
    """Convert hex color to RGBA tuple."""
    r, g, b = _hex_to_rgb(hex_color)
    return (r, g, b, alpha)


def _mix(start: str, end: str, t: float, alpha: int) -> tuple[int, int, int, int]:
    """Linear blend between two hex colors at position t (0..1)."""
    r0, g0, b0 = _hex_to_rgb(start)
    r1, g1, b1 = _hex_to_rgb(end)
    return (
        int(r0 + (r1 - r0) * t),
        int(g0 + (g1 - g0) * t),
        int(b0 + (b1 - b0) * t),
        alpha,
    )


def _text_width(font, text: str) -> float:
    bbox = font.getbbox(text)
    return bbox[2] - bbox[0]


def _format_value(value: float) -> str:
    return f"{value:,.0f}" if float(value).is_integer() else f"{value:,.2f}"


def bezier_points(link: FlowLink, steps: int = 30) -> list[tuple[float, float]]:
    """Sample a link's centre curve into ``steps + 1`` points."""
    (sx, sy), (c1x, c1y), (c2x, c2y), (ex, ey) = link.control_points()
    points = []
    for i in range(steps + 1):
        t = i / steps
        # Cubic bezier
        x = (1-t)**3 * sx + 3*(1-t)**2*t * c1x + 3*(1-t)*t**2 * c2x + t**3 * ex
        y = (1-t)**3 * sy + 3*(1-t)**2*t * c1y + 3*(1-t)*t**2 * c2y + t**3 * ey
        points.append((x, y))
    return points


# --- PNG renderer ---

class FlowRenderer:
    """Renders a FlowDiagram to a PNG image."""

    LABEL_GAP = 8
    VALUE_LINE = 12
    NODE_RADIUS = 4
    TITLE_BAR_WIDTH = 6
    TITLE_BAR_HEIGHT = 24

    def __init__(self, scale: float = 1.0, surface: str = "dark"):
        self.scale = scale
        self.surface: SurfacePalette = get_surface(surface)
        self.font_title = _load_bold_font(int(18 * scale))
        self.font_label = _load_bold_font(int(10 * scale))
        self.font_value = _load_font(int(8 * scale))
        self.font_caption = _load_bold_font(int(10 * scale))

    def render(
        self,
        diagram: FlowDiagram,
        output_path: Optional[str] = None,
        hover: HoverState = NO_HOVER,
    ) -> bytes:
        """Render the diagram to PNG bytes. Optionally save to file.

        Args:
            diagram: Laid-out diagram from ``build_flow_diagram``.
            output_path: Optional path to save the PNG.
            hover: Hover state to draw; the default highlights everything.
        """
        s = self.scale
        img_width = int(diagram.canvas_width * s)
        img_height = int(diagram.canvas_height * s)

        img = Image.new("RGBA", (img_width, img_height), _hex_to_rgba(self.surface.background))

        # Links go on their own layer so overlapping bands blend
        link_layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
        link_draw = ImageDraw.Draw(link_layer)
        for link in diagram.links:
            self._draw_link(link_draw, link, diagram.primary_color, diagram.secondary_color, hover)
        img = Image.alpha_composite(img, link_layer)

        draw = ImageDraw.Draw(img, "RGBA")
        self._draw_title(draw, diagram)
        for node in diagram.nodes:
            self._draw_node(draw, node, hover)
        self._draw_captions(draw, diagram, img_width, img_height)

        buf = BytesIO()
        img.save(buf, format="PNG", optimize=True)
        png_bytes = buf.getvalue()

        if output_path:
            Path(output_path).write_bytes(png_bytes)
            logger.info(f"Rendered flow diagram to {output_path}")

        return png_bytes

    def _link_alpha(self, link: FlowLink, hover: HoverState) -> int:
        if not is_link_highlighted(link, hover):
            return self.surface.dimmed_alpha
        if isinstance(hover, NoHover):
            return self.surface.link_alpha
        return self.surface.link_highlight_alpha

    def _draw_link(
        self,
        draw: ImageDraw.ImageDraw,
        link: FlowLink,
        start_color: str,
        end_color: str,
        hover: HoverState,
    ):
        """Draw one link as a thick sampled bezier with a left-to-right gradient."""
        alpha = self._link_alpha(link, hover)
        width = max(1, int(round(link.width * self.scale)))
        points = [(x * self.scale, y * self.scale) for x, y in bezier_points(link)]
        segments = len(points) - 1
        for i in range(segments):
            color = _mix(start_color, end_color, i / max(segments - 1, 1), alpha)
            draw.line([points[i], points[i+1]], fill=color, width=width)

    def _draw_node(self, draw: ImageDraw.ImageDraw, node: FlowNode, hover: HoverState):
        """Draw a node bar with its name and total beside it."""
        s = self.scale
        x = node.x * s
        y = node.y * s
        w = node.width * s
        h = node.height * s

        alpha = 255 if is_node_highlighted(node, hover) else self.surface.dimmed_alpha * 3
        draw.rounded_rectangle(
            [x, y, x + w, y + h],
            radius=int(self.NODE_RADIUS * s),
            fill=_hex_to_rgba(node.color, alpha),
        )

        # Source labels sit right of the bar, target labels left of it
        name = node.display_name
        value = _format_value(node.total_value)
        gap = self.LABEL_GAP * s
        center_y = y + h / 2
        label_h = self.font_label.getbbox(name)[3]
        if node.column == Column.SOURCE:
            name_x = x + w + gap
            value_x = name_x
        else:
            name_x = x - gap - _text_width(self.font_label, name)
            value_x = x - gap - _text_width(self.font_value, value)

        draw.text((name_x, center_y - label_h / 2), name, fill=self.surface.label_color, font=self.font_label)
        draw.text(
            (value_x, center_y - label_h / 2 + self.VALUE_LINE * s),
            value,
            fill=self.surface.value_color,
            font=self.font_value,
        )

    def _draw_title(self, draw: ImageDraw.ImageDraw, diagram: FlowDiagram):
        """Draw the accent bar and title in the top-left corner."""
        s = self.scale
        bar_x = 12 * s
        bar_y = 12 * s
        draw.rounded_rectangle(
            [bar_x, bar_y, bar_x + self.TITLE_BAR_WIDTH * s, bar_y + self.TITLE_BAR_HEIGHT * s],
            radius=int(3 * s),
            fill=diagram.primary_color,
        )
        draw.text(
            (bar_x + (self.TITLE_BAR_WIDTH + 8) * s, bar_y),
            diagram.title,
            fill=self.surface.title_color,
            font=self.font_title,
        )

    def _draw_captions(self, draw: ImageDraw.ImageDraw, diagram: FlowDiagram, img_width: int, img_height: int):
        """Draw the column captions along the bottom edge."""
        s = self.scale
        y = img_height - 24 * s
        left = diagram.source_caption.upper()
        right = diagram.target_caption.upper()
        draw.text((16 * s, y), left, fill=self.surface.caption_color, font=self.font_caption)
        draw.text(
            (img_width - 16 * s - _text_width(self.font_caption, right), y),
            right,
            fill=self.surface.caption_color,
            font=self.font_caption,
        )


# --- SVG export ---

def _escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def _opacity(alpha: int) -> str:
    return f"{alpha / 255:.2f}"


def render_svg(
    diagram: FlowDiagram,
    hover: HoverState = NO_HOVER,
    surface: str = "dark",
) -> str:
    """Render the diagram to an SVG document string.

    Link paths are emitted verbatim from ``FlowLink.path``.
    """
    palette = get_surface(surface)
    width = diagram.canvas_width
    height = diagram.canvas_height

    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width:g}" height="{height:g}" '
        f'viewBox="0 0 {width:g} {height:g}">',
        f'<rect width="100%" height="100%" fill="{palette.background}"/>',
        "<defs>",
        '<linearGradient id="flow-grad" x1="0%" y1="0%" x2="100%" y2="0%">',
        f'<stop offset="0%" stop-color="{diagram.primary_color}"/>',
        f'<stop offset="100%" stop-color="{diagram.secondary_color}"/>',
        "</linearGradient>",
        "</defs>",
        f'<text x="16" y="28" font-family="sans-serif" font-size="18" font-weight="bold" '
        f'fill="{palette.title_color}">{_escape(diagram.title)}</text>',
    ]

    for link in diagram.links:
        if not is_link_highlighted(link, hover):
            alpha = palette.dimmed_alpha
        elif isinstance(hover, NoHover):
            alpha = palette.link_alpha
        else:
            alpha = palette.link_highlight_alpha
        parts.append(
            f'<path d="{link.path}" stroke="url(#flow-grad)" stroke-width="{link.width:.2f}" '
            f'stroke-opacity="{_opacity(alpha)}" fill="none" data-index="{link.index}"/>'
        )

    for node in diagram.nodes:
        opacity = "1" if is_node_highlighted(node, hover) else _opacity(palette.dimmed_alpha * 3)
        parts.append(
            f'<rect x="{node.x:.2f}" y="{node.y:.2f}" width="{node.width:.2f}" '
            f'height="{node.height:.2f}" rx="4" fill="{node.color}" fill-opacity="{opacity}" '
            f'data-id="{_escape(node.id)}" data-column="{node.column.value}"/>'
        )
        is_source = node.column == Column.SOURCE
        label_x = node.x + node.width + 8 if is_source else node.x - 8
        anchor = "start" if is_source else "end"
        parts.append(
            f'<text x="{label_x:.2f}" y="{node.center_y:.2f}" dy=".35em" text-anchor="{anchor}" '
            f'font-family="sans-serif" font-size="10" font-weight="bold" '
            f'fill="{palette.label_color}">{_escape(node.display_name)}</text>'
        )
        parts.append(
            f'<text x="{label_x:.2f}" y="{node.center_y + 12:.2f}" dy=".35em" text-anchor="{anchor}" '
            f'font-family="sans-serif" font-size="8" '
            f'fill="{palette.value_color}">{_format_value(node.total_value)}</text>'
        )

    caption_y = height - 12
    parts.append(
        f'<text x="16" y="{caption_y:g}" font-family="sans-serif" font-size="10" font-weight="bold" '
        f'fill="{palette.caption_color}">{_escape(diagram.source_caption.upper())}</text>'
    )
    parts.append(
        f'<text x="{width - 16:g}" y="{caption_y:g}" text-anchor="end" font-family="sans-serif" '
        f'font-size="10" font-weight="bold" fill="{palette.caption_color}">'
        f'{_escape(diagram.target_caption.upper())}</text>'
    )
    parts.append("</svg>")
    return "\n".join(parts)
