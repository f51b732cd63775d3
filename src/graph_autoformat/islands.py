"""Island detection and collision resolution.

An island is a weakly-connected component. Islands are laid out independently
and then stacked: each one moves down rigidly, just enough to clear the node
footprints of the islands already placed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import networkx as nx

from graph_autoformat.intervals import IntervalStructure
from graph_autoformat.types import GAP, NodeInfo

logger = logging.getLogger(__name__)


def find_islands(digraph: nx.DiGraph) -> list[list[str]]:
    """Connected components, each in input node order, ordered by their first node."""
    position: dict[str, int] = {node_id: i for i, node_id in enumerate(digraph.nodes)}
    islands = [sorted(component, key=position.__getitem__) for component in nx.weakly_connected_components(digraph)]
    islands.sort(key=lambda island: position[island[0]])
    return islands


@dataclass
class IslandLayout:
    """Positions computed for one island, before stacking."""

    node_ids: list[str]
    infos: dict[str, NodeInfo]
    x: dict[str, float]
    y: dict[str, float]
    row_of: dict[str, int]
    primary_root_y: float
    shift: float = field(default=0)


def resolve_island_collisions(islands: list[IslandLayout], gap: float = GAP) -> list[IslandLayout]:
    """Stack islands top to bottom without overlapping footprints.

    Islands are taken in order of their primary root's original y. For each,
    the shift is the largest ``max_bottom(node x-span) + gap - node.y`` over its
    nodes (never negative), computed against a structure holding every node of
    the islands already placed. Comparing node footprints rather than bounding
    boxes lets interleaved islands stay where they are.

    Returns the islands in placement order with ``y`` and ``shift`` updated.
    """
    placed = sorted(islands, key=lambda island: island.primary_root_y)
    intervals = IntervalStructure()

    for island in placed:
        shift: float = 0
        for node_id in island.node_ids:
            node_x = island.x[node_id]
            max_bottom = intervals.query_max_bottom_y(node_x, node_x + island.infos[node_id].width)
            if max_bottom == float("-inf"):
                continue
            shift = max(shift, max_bottom + gap - island.y[node_id])

        if shift > 0:
            logger.debug("Shifting island rooted at y=%s down by %s", island.primary_root_y, shift)
            island.y = {node_id: y + shift for node_id, y in island.y.items()}
            island.shift = shift

        for node_id in island.node_ids:
            node_x = island.x[node_id]
            info = island.infos[node_id]
            intervals.insert(node_x, node_x + info.width, island.y[node_id] + info.height)

    return placed
