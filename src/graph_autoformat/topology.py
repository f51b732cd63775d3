"""Topology analysis — roles, chains, topological order and ancestor sets.

Everything here is computed once per layout call and never mutated by the
later passes.
"""

from __future__ import annotations

from collections import deque

from graph_autoformat.graph import GraphIR
from graph_autoformat.types import ChainMap, NodeInfo, NodeRole

# ─── Topology ─────────────────────────────────────────────────────────────────


def build_topology(gir: GraphIR) -> dict[str, NodeInfo]:
    """Classify every node and record its deduplicated parents and children.

    Neighbour lists follow the input node order rather than edge order, so two
    edge lists describing the same graph yield identical topologies.
    """
    position: dict[str, int] = {node_id: i for i, node_id in enumerate(gir.digraph.nodes)}

    infos: dict[str, NodeInfo] = {}
    for box in gir.boxes():
        parents = tuple(sorted(gir.digraph.predecessors(box.id), key=position.__getitem__))
        children = tuple(sorted(gir.digraph.successors(box.id), key=position.__getitem__))
        infos[box.id] = NodeInfo(
            id=box.id,
            role=NodeRole.classify(len(parents), len(children)),
            parents=parents,
            children=children,
            initial_x=box.x,
            initial_y=box.y,
            width=box.width,
            height=box.height,
        )
    return infos


def top_left_key(info: NodeInfo) -> tuple[float, float]:
    """Sort key placing the topmost, then leftmost, node first."""
    return (info.initial_y, info.initial_x)


def find_primary_root(infos: dict[str, NodeInfo]) -> NodeInfo:
    """The top-left root anchors the layout of its island."""
    roots = [info for info in infos.values() if info.role is NodeRole.Root]
    return min(roots, key=top_left_key)


# ─── Chains ───────────────────────────────────────────────────────────────────


def trace_chain(start_id: str, first_child_id: str, infos: dict[str, NodeInfo]) -> list[str]:
    """Walk from a boundary node through simple nodes to the next boundary.

    Returns ``[start_id, interior..., end_id]``.
    """
    chain = [start_id]
    current_id = first_child_id

    while True:
        chain.append(current_id)
        current = infos[current_id]
        if current.role.is_boundary:
            break
        if not current.children:
            break
        current_id = current.children[0]

    return chain


def build_chain_map(infos: dict[str, NodeInfo]) -> ChainMap:
    """Trace every chain once: start boundary id -> first child id -> chain."""
    chain_map: ChainMap = {}
    for info in infos.values():
        if not info.role.is_boundary:
            continue
        chain_map[info.id] = {child_id: trace_chain(info.id, child_id, infos) for child_id in info.children}
    return chain_map


# ─── Ordering ─────────────────────────────────────────────────────────────────


def topological_sort(infos: dict[str, NodeInfo]) -> list[str]:
    """Kahn's algorithm with a FIFO queue.

    The queue starts with the roots in top-left order, so the primary root is
    always first and rows are claimed from it outward.
    """
    in_degree: dict[str, int] = {info.id: len(info.parents) for info in infos.values()}

    roots = sorted((info for info in infos.values() if not info.parents), key=top_left_key)
    queue: deque[str] = deque(info.id for info in roots)
    order: list[str] = []

    while queue:
        node_id = queue.popleft()
        order.append(node_id)
        for child_id in infos[node_id].children:
            in_degree[child_id] -= 1
            if in_degree[child_id] == 0:
                queue.append(child_id)

    return order


def build_ancestor_sets(infos: dict[str, NodeInfo], order: list[str]) -> dict[str, frozenset[str]]:
    """Full ancestor closure of every node in one pass over topological order."""
    ancestors: dict[str, frozenset[str]] = {}
    for node_id in order:
        acc: set[str] = set()
        for parent_id in infos[node_id].parents:
            acc.add(parent_id)
            acc |= ancestors[parent_id]
        ancestors[node_id] = frozenset(acc)
    return ancestors
