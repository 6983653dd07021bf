"""Tests for parser.py — YAML recipes."""

from __future__ import annotations

import pytest

from flow_canvas.models import Column, FlowEdge
from flow_canvas.parser import parse_dict, parse_file, parse_yaml, recipe_to_yaml

RECIPE = """
title: Weekly Transfers
theme: blue
surface: light
names:
  hub_nks: Hub
  cm: Chiang Mai
edges:
  - {source: hub_nks, dest: cm, qty: 120}
  - [hub_nks, kpp, 40]
  - {source: cm, dest: cm, qty: 9}
options:
  canvas_width: 900
"""


def test_parse_recipe_fields():
    recipe = parse_yaml(RECIPE)
    assert recipe.title == "Weekly Transfers"
    assert recipe.theme == "blue"
    assert recipe.surface == "light"
    assert recipe.names == {"hub_nks": "Hub", "cm": "Chiang Mai"}
    assert recipe.edges[1] == FlowEdge(source="hub_nks", dest="kpp", qty=40)
    assert recipe.options == {"canvas_width": 900.0}


def test_recipe_builds_diagram():
    diagram = parse_yaml(RECIPE).build()
    assert diagram.title == "Weekly Transfers"
    assert diagram.canvas_width == 900
    assert diagram.total_flow == 160
    assert len(diagram.links) == 2
    assert diagram.get_node("hub_nks", Column.SOURCE).display_name == "Hub"
    assert diagram.get_node("kpp", Column.TARGET).display_name == "kpp"


def test_defaults():
    recipe = parse_yaml("edges: [[a, b, 1]]")
    assert recipe.title == "Pallet Transfer Flow"
    assert recipe.theme == "indigo"
    assert recipe.surface == "dark"
    assert recipe.resolver() is None


def test_empty_yaml_rejected():
    with pytest.raises(ValueError, match="Empty YAML input"):
        parse_yaml("")


def test_non_mapping_rejected():
    with pytest.raises(ValueError):
        parse_yaml("- a\n- b\n")


def test_bad_edge_rejected():
    with pytest.raises(ValueError, match="Invalid edge"):
        parse_yaml("edges:\n  - {source: a, qty: 1}\n")


def test_unknown_option_rejected():
    with pytest.raises(ValueError, match="Unknown layout option"):
        parse_dict({"edges": [], "options": {"zoom": 2}})


def test_yaml_round_trip(tmp_path):
    recipe = parse_yaml(RECIPE)
    path = tmp_path / "recipe.yaml"
    path.write_text(recipe_to_yaml(recipe))
    assert parse_file(str(path)) == recipe


def test_malformed_yaml_rejected():
    with pytest.raises(ValueError, match="Invalid YAML"):
        parse_yaml("edges: [A, B")


@pytest.mark.parametrize("field, value, message", [
    ("names", ["a", "b"], "'names' must be a mapping"),
    ("options", [1, 2], "'options' must be a mapping"),
    ("edges", {"source": "a", "dest": "b", "qty": 1}, "'edges' must be a list"),
])
def test_wrong_field_types_rejected(field, value, message):
    with pytest.raises(ValueError, match=message):
        parse_dict({field: value})


def test_names_as_yaml_list_rejected():
    with pytest.raises(ValueError, match="'names' must be a mapping"):
        parse_yaml("names: [a, b]\nedges: [[a, b, 1]]\n")
