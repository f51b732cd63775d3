"""Vertical placement — one y per row, packed against previously placed rows."""

from __future__ import annotations

from graph_autoformat.intervals import IntervalStructure
from graph_autoformat.rows import build_dfs_row_order
from graph_autoformat.types import GAP, NodeInfo


def y_pass(
    infos: dict[str, NodeInfo],
    x_final: dict[str, float],
    row_of: dict[str, int],
    primary_root_id: str,
    gap: float = GAP,
) -> dict[str, float]:
    """Assign every node the y of its row.

    Rows are placed in DFS visitation order. A row sits one gap below the
    lowest bottom edge already placed anywhere within its x-span. The interval
    structure is seeded so the first row lands exactly on the primary root's
    original y. Nodes are inserted with their own height, so a tall node only
    blocks the columns it actually covers.
    """
    row_nodes: dict[int, list[str]] = {}
    for node_id, row in row_of.items():
        row_nodes.setdefault(row, []).append(node_id)

    intervals = IntervalStructure(base_bottom_y=infos[primary_root_id].initial_y - gap)
    y_out: dict[str, float] = {}

    for row in build_dfs_row_order(infos, row_of, primary_root_id):
        node_ids = row_nodes.get(row, [])
        if not node_ids:
            continue

        x_min = min(x_final[node_id] for node_id in node_ids)
        x_max = max(x_final[node_id] + infos[node_id].width for node_id in node_ids)
        y = intervals.query_max_bottom_y(x_min, x_max) + gap

        for node_id in node_ids:
            y_out[node_id] = y
        for node_id in node_ids:
            info = infos[node_id]
            intervals.insert(x_final[node_id], x_final[node_id] + info.width, y + info.height)

    return y_out
