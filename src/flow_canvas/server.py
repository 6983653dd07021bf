"""Flow-Canvas server — MCP tools for laying out and rendering flow diagrams."""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .highlight import HighlightIndex, hover_state_from_dict
from .parser import parse_yaml
from .renderer import FlowRenderer, render_svg
from .themes import FLOW_THEMES, SURFACES

logger = logging.getLogger(__name__)


# --- Constants ---
OUTPUT_DIR = Path(os.environ.get("FLOW_CANVAS_OUTPUT_DIR", Path.home() / ".flow-canvas"))

server = Server("flow-canvas")


def _ensure_output_dir():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


RECIPE_DESCRIPTION = (
    "YAML string defining the flow diagram. Example:\n"
    "title: Pallet Transfer Flow\n"
    "theme: indigo\n"
    "names:\n"
    "  hub_nks: Hub\n"
    "edges:\n"
    "  - {source: hub_nks, dest: cm, qty: 120}\n"
    "  - [hub_nks, kpp, 40]\n"
    "\n"
    "Self loops and non-positive quantities are ignored."
)

HOVER_SCHEMA = {
    "type": "object",
    "description": (
        "Hover state: {kind: 'none'}, {kind: 'node', id: <entity id>} "
        "or {kind: 'link', index: <link index>}."
    ),
    "properties": {
        "kind": {"type": "string", "enum": ["none", "node", "link"]},
        "id": {"type": "string"},
        "index": {"type": "integer"},
    },
}


# --- Tool definitions ---

@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="render_flow",
            description=(
                "Render a source → destination flow diagram from a YAML recipe. "
                "Returns the path to the rendered PNG or SVG file."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_recipe": {"type": "string", "description": RECIPE_DESCRIPTION},
                    "scale": {
                        "type": "number",
                        "description": "Render scale factor for PNG output (default 2.0)",
                        "default": 2.0,
                    },
                    "format": {
                        "type": "string",
                        "enum": ["png", "svg"],
                        "description": "Output format. Default: 'png'.",
                        "default": "png",
                    },
                    "filename": {
                        "type": "string",
                        "description": "Output filename (without extension). Default: auto-generated UUID.",
                    },
                    "hover": HOVER_SCHEMA,
                },
                "required": ["yaml_recipe"],
            },
        ),
        Tool(
            name="compute_flow_layout",
            description=(
                "Compute node and link geometry for a flow recipe without rendering. "
                "Returns the diagram as JSON (nodes, links, canvas size, total flow)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_recipe": {"type": "string", "description": RECIPE_DESCRIPTION},
                },
                "required": ["yaml_recipe"],
            },
        ),
        Tool(
            name="query_highlight",
            description=(
                "List which links and nodes are highlighted for a hover state."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "yaml_recipe": {"type": "string", "description": RECIPE_DESCRIPTION},
                    "hover": HOVER_SCHEMA,
                },
                "required": ["yaml_recipe", "hover"],
            },
        ),
        Tool(
            name="list_themes",
            description="List available accent themes and surfaces.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    if name == "render_flow":
        return await _render_flow(arguments)
    elif name == "compute_flow_layout":
        return await _compute_flow_layout(arguments)
    elif name == "query_highlight":
        return await _query_highlight(arguments)
    elif name == "list_themes":
        return await _list_themes(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]


async def _render_flow(args: dict) -> list[TextContent]:
    """Render a YAML recipe to PNG or SVG."""
    _ensure_output_dir()

    scale = args.get("scale", 2.0)
    fmt = args.get("format", "png")
    filename = args.get("filename", str(uuid.uuid4())[:8])

    try:
        recipe = parse_yaml(args["yaml_recipe"])
        diagram = recipe.build()
        hover = hover_state_from_dict(args.get("hover"), diagram.links)
    except (KeyError, ValueError) as e:
        return [TextContent(type="text", text=f"Failed to parse flow recipe: {e}")]

    output_path = OUTPUT_DIR / f"{filename}.{fmt}"

    try:
        if fmt == "svg":
            output_path.write_text(render_svg(diagram, hover=hover, surface=recipe.surface))
        else:
            renderer = FlowRenderer(scale=scale, surface=recipe.surface)
            renderer.render(diagram, output_path=str(output_path), hover=hover)
    except Exception as e:
        logger.error(f"Render error: {e}")
        return [TextContent(type="text", text=f"Rendering failed: {e}")]

    return [TextContent(
        type="text",
        text=json.dumps({
            "status": "success",
            "path": str(output_path),
            "title": diagram.title,
            "nodes": len(diagram.nodes),
            "links": len(diagram.links),
            "total_flow": diagram.total_flow,
            "canvas_height": diagram.canvas_height,
        }),
    )]


async def _compute_flow_layout(args: dict) -> list[TextContent]:
    """Return the computed geometry as JSON."""
    try:
        diagram = parse_yaml(args["yaml_recipe"]).build()
    except (KeyError, ValueError) as e:
        return [TextContent(type="text", text=f"Failed to parse flow recipe: {e}")]

    return [TextContent(type="text", text=diagram.model_dump_json())]


async def _query_highlight(args: dict) -> list[TextContent]:
    """Evaluate highlight membership for a hover state."""
    try:
        diagram = parse_yaml(args["yaml_recipe"]).build()
        state = hover_state_from_dict(args.get("hover"), diagram.links)
    except (KeyError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid highlight query: {e}")]

    index = HighlightIndex(diagram.links, state)
    return [TextContent(
        type="text",
        text=json.dumps({
            "links": [link.index for link in index.highlighted_links()],
            "nodes": [
                {"id": node.id, "column": node.column.value}
                for node in index.highlighted_nodes(diagram.nodes)
            ],
        }),
    )]


async def _list_themes(args: dict) -> list[TextContent]:
    """List available themes and surfaces."""
    themes = [
        {"name": t.name, "label": t.get_label(), "primary": t.primary, "secondary": t.secondary}
        for t in FLOW_THEMES.values()
    ]
    return [TextContent(
        type="text",
        text=json.dumps({"themes": themes, "surfaces": list(SURFACES.keys())}),
    )]


def main():
    """Entry point for the MCP server."""
    import asyncio
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    asyncio.run(_run())


async def _run():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
