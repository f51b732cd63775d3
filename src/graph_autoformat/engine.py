"""Full autoformat pipeline.

Per island:
  1. Topology, chains, topological order, ancestor sets
  2. Row assignment
  3. Initial x (Anchor / Merge Alignment / Sequential)
  4. Split Pull
  5. Merge Approach + reconciliation
  6. Row-ordered y placement

Then islands are stacked without overlap.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from graph_autoformat.graph import GraphIR
from graph_autoformat.islands import IslandLayout, find_islands, resolve_island_collisions
from graph_autoformat.rows import assign_rows
from graph_autoformat.topology import (
    build_ancestor_sets,
    build_chain_map,
    build_topology,
    find_primary_root,
    topological_sort,
)
from graph_autoformat.types import GAP, LayoutNode, NodeInfo, Point
from graph_autoformat.xpass import (
    build_merge_approach_map,
    compute_initial_x_positions,
    pull_splits_toward_merges,
    reconcile_x_positions,
)
from graph_autoformat.ypass import y_pass

logger = logging.getLogger(__name__)

GraphLike = GraphIR | Mapping[str, Any]


def _as_graph_ir(graph: GraphLike) -> GraphIR:
    return graph if isinstance(graph, GraphIR) else GraphIR.from_dict(graph)


def layout_island(island_infos: dict[str, NodeInfo], gap: float = GAP) -> IslandLayout:
    """Run every per-island pass and return the island's unstacked positions."""
    order = topological_sort(island_infos)
    chain_map = build_chain_map(island_infos)
    ancestor_sets = build_ancestor_sets(island_infos, order)
    primary_root = find_primary_root(island_infos)

    row_of = assign_rows(island_infos, order, chain_map)
    initial_x = compute_initial_x_positions(island_infos, primary_root.id, order, gap)
    pulled_x = pull_splits_toward_merges(
        island_infos,
        primary_root.id,
        order,
        row_of,
        initial_x,
        chain_map,
        ancestor_sets,
        gap,
    )
    merge_approaches = build_merge_approach_map(island_infos, row_of, chain_map)
    x_final = reconcile_x_positions(
        island_infos, order, primary_root.id, pulled_x, merge_approaches, ancestor_sets, gap
    )
    y_final = y_pass(island_infos, x_final, row_of, primary_root.id, gap)

    return IslandLayout(
        node_ids=list(island_infos),
        infos=island_infos,
        x=x_final,
        y=y_final,
        row_of=row_of,
        primary_root_y=primary_root.initial_y,
    )


def analyze_layout(graph: GraphLike, gap: float = GAP) -> dict[str, LayoutNode]:
    """Compute the tidy layout of every node, keyed by node id in input order.

    Raises:
        GraphValidationError: the graph is malformed (checked before any pass).
        CyclicGraphError: the graph has a directed cycle.
    """
    gir = _as_graph_ir(graph)
    if gir.digraph.number_of_nodes() == 0:
        return {}

    infos = build_topology(gir)
    groups = find_islands(gir.digraph)
    logger.debug("Laying out %d nodes in %d island(s)", len(infos), len(groups))

    islands = [layout_island({node_id: infos[node_id] for node_id in group}, gap) for group in groups]
    resolve_island_collisions(islands, gap)

    placed: dict[str, LayoutNode] = {}
    for island in islands:
        for node_id in island.node_ids:
            info = island.infos[node_id]
            placed[node_id] = LayoutNode(
                id=node_id,
                x=island.x[node_id],
                y=island.y[node_id],
                row=island.row_of[node_id],
                width=info.width,
                height=info.height,
            )

    return {node_id: placed[node_id] for node_id in gir.node_ids}


def compute_positions(graph: GraphLike, gap: float = GAP) -> dict[str, Point]:
    """The pure layout function: node id -> new top-left position."""
    return {node_id: Point(node.x, node.y) for node_id, node in analyze_layout(graph, gap).items()}


def autoformat(graph: Mapping[str, Any], gap: float = GAP) -> dict[str, Any]:
    """Return a copy of ``graph`` with every node moved to its tidy position.

    Only ``x`` and ``y`` change. Edges, any other top-level keys and the rest
    of each node's payload are carried over; ``graph`` itself is not modified.
    """
    layout = analyze_layout(graph, gap)
    nodes = {
        node_id: {**node, "x": layout[node_id].x, "y": layout[node_id].y} for node_id, node in graph["nodes"].items()
    }
    return {**graph, "nodes": nodes}
