"""Tests for web.py — aiohttp endpoints."""

from __future__ import annotations

import asyncio

from aiohttp import test_utils

from flow_canvas.web import create_app

RECIPE = {
    "title": "Transfers",
    "names": {"A": "Hub"},
    "edges": [["A", "X", 10], ["A", "Y", 30], ["B", "X", 20]],
}


def call(method: str, path: str, **kwargs):
    """Issue one request against a fresh app; returns (status, body)."""
    async def _run():
        async with test_utils.TestClient(test_utils.TestServer(create_app())) as client:
            resp = await client.request(method, path, **kwargs)
            if resp.content_type == "application/json":
                return resp.status, await resp.json()
            return resp.status, await resp.read()
    return asyncio.run(_run())


def test_layout_from_recipe_object():
    status, data = call("POST", "/api/layout", json={"recipe": RECIPE})
    assert status == 200
    assert data["total_flow"] == 60
    assert data["nodes"][0]["display_name"] == "Hub"


def test_layout_from_yaml():
    status, data = call("POST", "/api/layout", json={"yaml": "edges: [[A, A, 5]]"})
    assert status == 200
    assert data["nodes"] == []
    assert data["canvas_height"] == 400


def test_layout_rejects_missing_recipe():
    status, data = call("POST", "/api/layout", json={"edges": []})
    assert status == 400
    assert "yaml" in data["error"]


def test_render_png():
    status, body = call("POST", "/api/render", json={"recipe": RECIPE})
    assert status == 200
    assert body.startswith(b"\x89PNG")


def test_render_svg():
    status, body = call("POST", "/api/render", json={"recipe": RECIPE, "format": "svg"})
    assert status == 200
    assert body.startswith(b"<svg")


def test_highlight_link():
    status, data = call("POST", "/api/highlight", json={"recipe": RECIPE, "hover": {"kind": "link", "index": 1}})
    assert status == 200
    assert data["active"] is True
    assert data["links"] == [1]
    assert sorted((n["id"], n["column"]) for n in data["nodes"]) == [("A", "source"), ("Y", "target")]


def test_highlight_idle():
    status, data = call("POST", "/api/highlight", json={"recipe": RECIPE})
    assert status == 200
    assert data["active"] is False
    assert data["links"] == [0, 1, 2]


def test_themes():
    status, data = call("GET", "/api/themes")
    assert status == 200
    assert data["themes"]["indigo"]["primary"] == "#6366f1"


def test_layout_rejects_malformed_yaml():
    status, data = call("POST", "/api/layout", json={"yaml": "edges: [A, B"})
    assert status == 400
    assert "Invalid YAML" in data["error"]


def test_layout_rejects_names_list():
    status, data = call("POST", "/api/layout", json={"recipe": {"names": ["a", "b"]}})
    assert status == 400
    assert "'names' must be a mapping" in data["error"]
