"""Graph input model: validated node boxes and port-level edges over a networkx DiGraph."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from numbers import Real
from typing import Any

import networkx as nx

from graph_autoformat.exceptions import CyclicGraphError, GraphValidationError

logger = logging.getLogger(__name__)

_GEOMETRY_KEYS = ("x", "y", "width", "height")


@dataclass
class NodeBox:
    """A node as placed by the user: position, size and opaque payload.

    ``payload`` is the caller's full node mapping. It is never modified; it is
    only copied when coordinates are written back.
    """

    id: str
    x: float
    y: float
    width: float
    height: float
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Endpoint:
    """One end of an edge: a node id plus the port it attaches to."""

    node: str
    port: str | None = None


@dataclass(frozen=True)
class Edge:
    """A port-level connection from an output port to an input port."""

    output: Endpoint
    input: Endpoint


@dataclass
class GraphIR:
    """Validated graph ready for layout.

    ``digraph`` holds one node per input node (in input order, with the
    ``NodeBox`` under the ``data`` attribute) and one edge per connected node
    pair. Several port-level edges between the same pair collapse to a single
    adjacency edge; ``edges`` keeps the port-level list.
    """

    digraph: nx.DiGraph
    edges: list[Edge] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GraphIR:
        """Build and validate a graph from ``{"nodes": {...}, "edges": ...}``.

        ``edges`` may be a mapping of edge id to edge (the editor store format)
        or a plain sequence of edges. Every problem found is reported at once
        in a single ``GraphValidationError``; a directed cycle raises
        ``CyclicGraphError``.
        """
        if not isinstance(data, Mapping):
            raise GraphValidationError([f"graph must be a mapping, got {type(data).__name__}"])

        raw_nodes = data.get("nodes", {})
        raw_edges = data.get("edges", [])
        if not isinstance(raw_nodes, Mapping):
            raise GraphValidationError(["'nodes' must be a mapping of node id to node"])
        if isinstance(raw_edges, Mapping):
            raw_edges = list(raw_edges.values())

        problems: list[str] = []
        boxes = [box for box in (_parse_node(nid, raw, problems) for nid, raw in raw_nodes.items()) if box]
        edges = [edge for edge in (_parse_edge(i, raw, problems) for i, raw in enumerate(raw_edges)) if edge]

        known = set(raw_nodes)
        for edge in edges:
            for side, endpoint in (("output", edge.output), ("input", edge.input)):
                if endpoint.node not in known:
                    problems.append(
                        f"edge {edge.output.node} -> {edge.input.node}: unknown {side} node '{endpoint.node}'"
                    )

        if problems:
            raise GraphValidationError(problems)

        digraph: nx.DiGraph = nx.DiGraph()
        for box in boxes:
            digraph.add_node(box.id, data=box)
        for edge in edges:
            digraph.add_edge(edge.output.node, edge.input.node)

        if not nx.is_directed_acyclic_graph(digraph):
            raise CyclicGraphError([(src, tgt) for src, tgt in nx.find_cycle(digraph)])

        logger.debug(
            "Built graph: %d nodes, %d edges (%d distinct node pairs)",
            digraph.number_of_nodes(),
            len(edges),
            digraph.number_of_edges(),
        )
        return cls(digraph=digraph, edges=edges)

    @property
    def node_ids(self) -> list[str]:
        return list(self.digraph.nodes)

    def box(self, node_id: str) -> NodeBox:
        return self.digraph.nodes[node_id]["data"]

    def boxes(self) -> Iterable[NodeBox]:
        for node_id in self.digraph.nodes:
            yield self.digraph.nodes[node_id]["data"]


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _parse_node(node_id: str, raw: Any, problems: list[str]) -> NodeBox | None:
    if not isinstance(raw, Mapping):
        problems.append(f"node '{node_id}': expected a mapping, got {type(raw).__name__}")
        return None

    bad = [key for key in _GEOMETRY_KEYS if not _is_number(raw.get(key))]
    if bad:
        problems.append(f"node '{node_id}': missing or non-numeric {', '.join(bad)}")
        return None
    if raw["width"] < 0 or raw["height"] < 0:
        problems.append(f"node '{node_id}': negative size {raw['width']}x{raw['height']}")
        return None

    return NodeBox(
        id=node_id,
        x=raw["x"],
        y=raw["y"],
        width=raw["width"],
        height=raw["height"],
        payload=raw,
    )


def _parse_endpoint(raw: Any) -> Endpoint | None:
    if not isinstance(raw, Mapping) or not isinstance(raw.get("node"), str):
        return None
    return Endpoint(node=raw["node"], port=raw.get("port"))


def _parse_edge(index: int, raw: Any, problems: list[str]) -> Edge | None:
    if not isinstance(raw, Mapping):
        problems.append(f"edge #{index}: expected a mapping, got {type(raw).__name__}")
        return None

    output = _parse_endpoint(raw.get("output"))
    input_ = _parse_endpoint(raw.get("input"))
    if output is None or input_ is None:
        missing = [side for side, ep in (("output", output), ("input", input_)) if ep is None]
        problems.append(f"edge #{index}: missing node reference on {' and '.join(missing)}")
        return None

    return Edge(output=output, input=input_)
