"""Tests for server.py — MCP tool handlers."""

from __future__ import annotations

import asyncio
import json

import pytest

from flow_canvas import server

RECIPE = """
title: Transfers
edges:
  - [A, X, 10]
  - [A, Y, 30]
  - [B, X, 20]
"""


@pytest.fixture(autouse=True)
def output_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(server, "OUTPUT_DIR", tmp_path)
    return tmp_path


def payload(result) -> dict:
    (content,) = result
    return json.loads(content.text)


def test_render_png(output_dir):
    data = payload(asyncio.run(server._render_flow({"yaml_recipe": RECIPE, "filename": "flow"})))
    assert data["status"] == "success"
    assert data["path"] == str(output_dir / "flow.png")
    assert (output_dir / "flow.png").read_bytes().startswith(b"\x89PNG")
    assert data["links"] == 3
    assert data["total_flow"] == 60


def test_render_svg_with_hover(output_dir):
    args = {
        "yaml_recipe": RECIPE,
        "filename": "flow",
        "format": "svg",
        "hover": {"kind": "node", "id": "X"},
    }
    data = payload(asyncio.run(server._render_flow(args)))
    assert data["path"].endswith("flow.svg")
    assert (output_dir / "flow.svg").read_text().startswith("<svg")


def test_render_reports_bad_recipe():
    (content,) = asyncio.run(server._render_flow({"yaml_recipe": ""}))
    assert content.text.startswith("Failed to parse flow recipe")


def test_compute_layout():
    data = payload(asyncio.run(server._compute_flow_layout({"yaml_recipe": RECIPE})))
    assert data["title"] == "Transfers"
    assert [n["id"] for n in data["nodes"]] == ["A", "B", "X", "Y"]
    assert data["nodes"][0]["column"] == "source"
    assert len(data["links"]) == 3


def test_query_highlight():
    args = {"yaml_recipe": RECIPE, "hover": {"kind": "node", "id": "X"}}
    data = payload(asyncio.run(server._query_highlight(args)))
    assert data["links"] == [0, 2]
    assert data["nodes"] == [{"id": "X", "column": "target"}]


def test_query_highlight_bad_link():
    args = {"yaml_recipe": RECIPE, "hover": {"kind": "link", "index": 7}}
    (content,) = asyncio.run(server._query_highlight(args))
    assert content.text.startswith("Invalid highlight query")


def test_list_themes():
    data = payload(asyncio.run(server._list_themes({})))
    assert {t["name"] for t in data["themes"]} >= {"indigo", "amber"}
    assert data["surfaces"] == ["dark", "light"]


def test_malformed_yaml_reported_as_text():
    (content,) = asyncio.run(server._compute_flow_layout({"yaml_recipe": "edges: [A, B"}))
    assert content.text.startswith("Failed to parse flow recipe: Invalid YAML")
    (content,) = asyncio.run(server._render_flow({"yaml_recipe": "edges: [A, B"}))
    assert content.text.startswith("Failed to parse flow recipe: Invalid YAML")
