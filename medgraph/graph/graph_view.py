"""
Node-link export of the medication graph for the browser force layout.

Nodes are identified as ``"<kind>:<canonical key>"`` so that names differing
only by case collapse onto one node. Edges always point away from the
medication: ``contains`` to ingredients, ``causes`` and ``treats`` to effects.
"""

from __future__ import annotations

from typing import Any, Dict

import networkx as nx

from medgraph.graph.identity import canonical_key
from medgraph.graph.types import EntityKind, GraphData
from medgraph.search_engine.types import NotFound


def node_id(kind: EntityKind, name: str) -> str:
    return f"{EntityKind.parse(kind).singular}:{canonical_key(name)}"


def _add_node(g: nx.DiGraph, kind: EntityKind, name: str, description: str | None = None) -> str:
    nid = node_id(kind, name)
    if nid not in g:
        g.add_node(nid, label=name, node_type=kind.singular, description=description)
    elif description and not g.nodes[nid].get("description"):
        g.nodes[nid]["description"] = description
    return nid


def build_networkx_graph(graph: GraphData) -> nx.DiGraph:
    """
    Convert the graph into a directed NetworkX graph.

    Names referenced by a medication but missing as records still get a node.

    :param graph: Graph to convert.
    :return: Directed graph with ``label``, ``node_type`` and ``description`` node attributes
        and a ``relation`` edge attribute.
    """
    g = nx.DiGraph()

    for ingredient in graph.ingredients.values():
        _add_node(g, EntityKind.INGREDIENTS, ingredient.name, ingredient.description)
    for effect in graph.effects.values():
        _add_node(g, EntityKind.EFFECTS, effect.name, effect.description)

    for medication in graph.medications.values():
        med = _add_node(g, EntityKind.MEDICATIONS, medication.name)
        for name in medication.ingredients:
            g.add_edge(med, _add_node(g, EntityKind.INGREDIENTS, name), relation="contains")
        for name in medication.side_effects:
            g.add_edge(med, _add_node(g, EntityKind.EFFECTS, name), relation="causes")
        for name in medication.symptoms_treated:
            g.add_edge(med, _add_node(g, EntityKind.EFFECTS, name), relation="treats")

    return g


def _node_link(g: nx.DiGraph) -> Dict[str, Any]:
    return {
        "nodes": [{"id": nid, **attrs} for nid, attrs in g.nodes(data=True)],
        "links": [{"source": u, "target": v, **attrs} for u, v, attrs in g.edges(data=True)],
    }


def to_node_link(graph: GraphData) -> Dict[str, Any]:
    """
    Whole-graph node-link JSON: ``{"nodes": [...], "links": [...]}``.
    """
    return _node_link(build_networkx_graph(graph))


def neighborhood(graph: GraphData, kind: EntityKind | str, name: str, radius: int = 1) -> Dict[str, Any] | NotFound:
    """
    Node-link JSON of the entities within ``radius`` hops of one entity,
    ignoring edge direction. The centre node carries ``"center": True``.

    :param graph: Graph to read.
    :param kind: Kind of the centre entity.
    :param name: Name of the centre entity, matched case-insensitively.
    :param radius: Number of hops to include.
    :return: Node-link JSON, or :class:`NotFound` if the entity has no node.
    """
    kind = EntityKind.parse(kind)
    g = build_networkx_graph(graph)
    center = node_id(kind, name)
    if center not in g:
        return NotFound(kind=kind, name=name)

    sub = nx.ego_graph(g, center, radius=radius, undirected=True)
    data = _node_link(sub)
    for node in data["nodes"]:
        node["center"] = node["id"] == center
    return data
