#!/usr/bin/env python3
"""
Flow-Canvas web surface - HTTP endpoints around the flow layout engine

A lightweight aiohttp server for dashboards that want flow geometry or a
rendered diagram without embedding Python.  A browser front-end owns the
hover state and asks ``/api/highlight`` which links and nodes to emphasise.

Every POST body is JSON with either ``yaml`` (a recipe string) or
``recipe`` (the same recipe as a JSON object).

Usage:
    flow-canvas-web [--port 8767] [--host 0.0.0.0]
"""

import asyncio
import json
import logging
import os

from aiohttp import web

from .highlight import HighlightIndex, hover_state_from_dict
from .parser import FlowRecipe, parse_dict, parse_yaml
from .renderer import FlowRenderer, render_svg
from .themes import FLOW_THEMES, SURFACES

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_SCALE = float(os.environ.get("FLOW_CANVAS_SCALE", "1.5"))


class RecipeError(ValueError):
    """Request body did not contain a usable recipe."""


async def _read_recipe(request: web.Request) -> tuple[FlowRecipe, dict]:
    """Parse the JSON body into a recipe plus the raw body."""
    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        raise RecipeError(f"Invalid JSON body: {e}") from e
    if not isinstance(body, dict):
        raise RecipeError("Request body must be a JSON object")

    if "yaml" in body:
        return parse_yaml(body["yaml"]), body
    if "recipe" in body and isinstance(body["recipe"], dict):
        return parse_dict(body["recipe"]), body
    raise RecipeError("Request body needs 'yaml' or 'recipe'")


def _error(message: str, status: int = 400) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def handle_layout(request: web.Request) -> web.Response:
    """Return the computed diagram geometry."""
    try:
        recipe, _ = await _read_recipe(request)
        diagram = recipe.build()
    except ValueError as e:
        return _error(str(e))

    return web.json_response(diagram.model_dump(mode="json"))


async def handle_render(request: web.Request) -> web.Response:
    """Render the recipe to PNG (default) or SVG."""
    try:
        recipe, body = await _read_recipe(request)
        diagram = recipe.build()
        hover = hover_state_from_dict(body.get("hover"), diagram.links)
    except (KeyError, ValueError) as e:
        return _error(str(e))

    fmt = body.get("format", "png")
    try:
        if fmt == "svg":
            svg = render_svg(diagram, hover=hover, surface=recipe.surface)
            return web.Response(text=svg, content_type="image/svg+xml")
        renderer = FlowRenderer(scale=float(body.get("scale", DEFAULT_SCALE)), surface=recipe.surface)
        png = renderer.render(diagram, hover=hover)
    except Exception as e:
        logger.error(f"Render error: {e}")
        return _error(f"Rendering failed: {e}", status=500)

    return web.Response(body=png, content_type="image/png")


async def handle_highlight(request: web.Request) -> web.Response:
    """Report highlighted links (by index) and nodes for a hover state."""
    try:
        recipe, body = await _read_recipe(request)
        diagram = recipe.build()
        state = hover_state_from_dict(body.get("hover"), diagram.links)
    except (KeyError, ValueError) as e:
        return _error(str(e))

    index = HighlightIndex(diagram.links, state)
    return web.json_response({
        "active": index.active,
        "links": [link.index for link in index.highlighted_links()],
        "nodes": [
            {"id": node.id, "column": node.column.value}
            for node in index.highlighted_nodes(diagram.nodes)
        ],
    })


async def handle_themes(request: web.Request) -> web.Response:
    return web.json_response({
        "themes": {
            name: {"label": t.get_label(), "primary": t.primary, "secondary": t.secondary, "accent": t.accent}
            for name, t in FLOW_THEMES.items()
        },
        "surfaces": list(SURFACES.keys()),
    })


def create_app() -> web.Application:
    """Create the aiohttp application."""
    app = web.Application()

    app.router.add_post('/api/layout', handle_layout)
    app.router.add_post('/api/render', handle_render)
    app.router.add_post('/api/highlight', handle_highlight)
    app.router.add_get('/api/themes', handle_themes)

    return app


async def serve(host: str = '0.0.0.0', port: int = 8767):
    """Run the web server."""
    app = create_app()

    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Flow-Canvas running at http://{host}:{port}")

    # Keep running
    while True:
        await asyncio.sleep(3600)


def main():
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(description='Flow-Canvas Web Server')
    parser.add_argument('--host', default='0.0.0.0', help='Host to bind to')
    parser.add_argument('--port', type=int, default=8767, help='Port to listen on')
    args = parser.parse_args()

    try:
        asyncio.run(serve(host=args.host, port=args.port))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == '__main__':
    main()
