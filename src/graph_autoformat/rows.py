"""Row assignment and row visitation order.

A row is a horizontal priority bucket: lower indices are higher priority and
are placed first. Rows are claimed greedily while walking the graph in
topological order, so the topmost outgoing chain of each node continues that
node's row (the "spine") and every other chain opens a new row.
"""

from __future__ import annotations

import logging

from graph_autoformat.topology import top_left_key
from graph_autoformat.types import ChainMap, NodeInfo, NodeRole

logger = logging.getLogger(__name__)


def children_by_initial_y(info: NodeInfo, infos: dict[str, NodeInfo]) -> list[str]:
    """Children ordered top to bottom by the user's original y (stable)."""
    return sorted(info.children, key=lambda child_id: infos[child_id].initial_y)


def assign_rows(infos: dict[str, NodeInfo], order: list[str], chain_map: ChainMap) -> dict[str, int]:
    """Assign a row index to every node.

    Boundary nodes are visited in topological order. An unclaimed node opens a
    new row. Its chains are taken in initial-y order: the first one continues
    the current row, each later one opens a new row. A chain ending at a node
    that already has a row is a cross-row edge: only its interior nodes join
    the chain's row, except that a merge is promoted into the chain's row when
    that row has strictly higher priority than the merge's current one.
    """
    row_of: dict[str, int] = {}
    next_row = 0

    for node_id in order:
        info = infos[node_id]
        if info.role in (NodeRole.Simple, NodeRole.Leaf):
            continue

        if node_id not in row_of:
            row_of[node_id] = next_row
            next_row += 1
        current_row = row_of[node_id]

        spine_assigned = False
        for first_child_id in children_by_initial_y(info, infos):
            chain = chain_map[node_id][first_child_id]
            end_id = chain[-1]

            if spine_assigned:
                chain_row = next_row
                next_row += 1
            else:
                chain_row = current_row
                spine_assigned = True

            if end_id in row_of:
                if infos[end_id].role.is_merge_like and chain_row < row_of[end_id]:
                    logger.debug("Promoting merge %s from row %d to row %d", end_id, row_of[end_id], chain_row)
                    row_of[end_id] = chain_row
                members = chain[1:-1]
            else:
                members = chain[1:]

            for member_id in members:
                row_of.setdefault(member_id, chain_row)

    logger.debug("Assigned %d rows to %d nodes", next_row, len(row_of))
    return row_of


def build_dfs_row_order(infos: dict[str, NodeInfo], row_of: dict[str, int], primary_root_id: str) -> list[int]:
    """Order rows by first encounter in a depth-first walk.

    The walk starts at the primary root and visits children top to bottom,
    exhausting each subtree before the next sibling. Secondary roots follow in
    top-left order.
    """
    rows_encountered: set[int] = set()
    row_order: list[int] = []
    visited: set[str] = set()

    secondary_roots = sorted(
        (info for info in infos.values() if info.role is NodeRole.Root and info.id != primary_root_id),
        key=top_left_key,
    )

    for start_id in [primary_root_id] + [info.id for info in secondary_roots]:
        stack = [start_id]
        while stack:
            node_id = stack.pop()
            if node_id in visited:
                continue
            visited.add(node_id)

            row = row_of.get(node_id)
            if row is not None and row not in rows_encountered:
                rows_encountered.add(row)
                row_order.append(row)

            # Reversed so the topmost child is popped first.
            stack.extend(reversed(children_by_initial_y(infos[node_id], infos)))

    return row_order
