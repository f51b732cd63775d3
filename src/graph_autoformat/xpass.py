"""Horizontal placement — provisional x, split pulls, merge approach and reconciliation.

Placement rules:
  - Anchor: the primary root keeps the user's x.
  - Merge Alignment: a merge sits one gap right of its rightmost parent.
  - Sequential: any other node sits one gap right of its single parent.
  - Split Pull: splits and secondary roots move right (or, for roots, left)
    so their branch lines up with a downstream merge.
  - Merge Approach: the last interior node of a chain feeding a
    higher-priority merge leans toward that merge.

Each pass copies the x map it receives and returns the copy.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from graph_autoformat.topology import top_left_key
from graph_autoformat.types import GAP, ChainMap, NodeInfo, NodeRole

logger = logging.getLogger(__name__)


def _right(node_id: str, x: dict[str, float], infos: dict[str, NodeInfo]) -> float:
    return x[node_id] + infos[node_id].width


def _merge_alignment_x(info: NodeInfo, x: dict[str, float], infos: dict[str, NodeInfo], gap: float) -> float:
    return max(_right(parent_id, x, infos) for parent_id in info.parents) + gap


# ─── Initial Placement ────────────────────────────────────────────────────────


def compute_initial_x_positions(
    infos: dict[str, NodeInfo],
    primary_root_id: str,
    order: list[str],
    gap: float = GAP,
) -> dict[str, float]:
    """Provisional x for every node, in topological order.

    Secondary roots start at 0; Split Pull decides where they really go.
    """
    x: dict[str, float] = {}

    for node_id in order:
        info = infos[node_id]
        if node_id == primary_root_id:
            x[node_id] = info.initial_x
        elif info.role.is_merge_like:
            x[node_id] = _merge_alignment_x(info, x, infos, gap)
        elif not info.parents:
            x[node_id] = 0
        else:
            x[node_id] = _right(info.parents[0], x, infos) + gap

    return x


def compute_merge_x_excluding_subtree(
    merge_id: str,
    excluded_id: str,
    infos: dict[str, NodeInfo],
    x: dict[str, float],
    ancestor_sets: dict[str, frozenset[str]],
    gap: float = GAP,
) -> float | None:
    """Merge Alignment x using only parents outside ``excluded_id``'s subtree.

    Returns ``None`` when every parent descends from ``excluded_id``: the merge
    is then not independent of it and cannot be a pull target.
    """
    external = [
        _right(parent_id, x, infos)
        for parent_id in infos[merge_id].parents
        if parent_id != excluded_id and excluded_id not in ancestor_sets[parent_id]
    ]
    if not external:
        return None
    return max(external) + gap


def propagate_sequential(
    start_id: str,
    prev_right: float,
    x: dict[str, float],
    infos: dict[str, NodeInfo],
    gap: float = GAP,
) -> None:
    """Re-apply Sequential placement downstream of a moved node, in place.

    Simple nodes and leaves are updated. A split keeps its pulled x unless the
    move leaves it left of its parent, in which case it is pushed right and the
    walk continues through it. Roots and merges have their own rules and stop
    the walk.
    """
    stack = [(start_id, prev_right)]
    while stack:
        node_id, right = stack.pop()
        info = infos[node_id]
        if info.role is NodeRole.Split:
            if x[node_id] >= right + gap:
                continue
        elif info.role is NodeRole.Root or info.role.is_merge_like:
            continue
        x[node_id] = right + gap
        for child_id in info.children:
            stack.append((child_id, right + gap + info.width))


# ─── Split Pull ───────────────────────────────────────────────────────────────


def find_merge_pull_target(
    puller_id: str,
    infos: dict[str, NodeInfo],
    row_of: dict[str, int],
    x: dict[str, float],
    ancestor_sets: dict[str, frozenset[str]],
    chain_map: ChainMap,
    gap: float = GAP,
) -> float | None:
    """Find the x that ``puller_id`` should be pulled to, or ``None``.

    Walks the chains downstream of the puller depth-first:
      - PRIMARY: a merge in a strictly higher-priority row. The path stops
        there.
      - FALLBACK: a merge in the same or a lower-priority row. The walk
        continues through it looking for a deeper primary target.
      - Splits are walked through without being targets.

    The pull for a target is its independent x minus the width of the path
    from the puller's left edge to the target (each node's width plus one
    gap). The best primary pull wins over any fallback pull. Each boundary is
    reached through at most one path.
    """
    puller_row = row_of.get(puller_id, 0)
    puller = infos[puller_id]

    best_primary: float | None = None
    best_fallback: float | None = None

    visited: set[str] = {puller_id}
    # Frames of (boundary id, path width up to its right edge + gap, remaining children).
    stack: list[tuple[str, float, Iterator[str]]] = [(puller_id, puller.width + gap, iter(puller.children))]

    while stack:
        boundary_id, path_width, children = stack[-1]
        first_child_id = next(children, None)
        if first_child_id is None:
            stack.pop()
            continue

        chain = chain_map[boundary_id][first_child_id]
        end_id = chain[-1]
        if end_id in visited:
            continue

        interior = chain[1:-1]
        path_width_to_end = path_width + sum(infos[node_id].width for node_id in interior) + len(interior) * gap
        end = infos[end_id]

        if not end.role.is_merge_like:
            if end.role is NodeRole.Split:
                visited.add(end_id)
                stack.append((end_id, path_width_to_end + end.width + gap, iter(end.children)))
            continue

        merge_x = compute_merge_x_excluding_subtree(end_id, puller_id, infos, x, ancestor_sets, gap)
        pull = merge_x - path_width_to_end if merge_x is not None else None

        if row_of.get(end_id, 0) < puller_row:
            if pull is not None and (best_primary is None or pull > best_primary):
                best_primary = pull
            continue

        if pull is not None and (best_fallback is None or pull > best_fallback):
            best_fallback = pull
        visited.add(end_id)
        stack.append((end_id, path_width_to_end + end.width + gap, iter(end.children)))

    return best_primary if best_primary is not None else best_fallback


def pull_splits_toward_merges(
    infos: dict[str, NodeInfo],
    primary_root_id: str,
    order: list[str],
    row_of: dict[str, int],
    initial_x: dict[str, float],
    chain_map: ChainMap,
    ancestor_sets: dict[str, frozenset[str]],
    gap: float = GAP,
) -> dict[str, float]:
    """Apply Split Pull to secondary roots, then to splits.

    Secondary roots go first, top to bottom, so each sees the roots placed
    before it. Splits follow in reverse topological order and never move left
    of their parent's right edge plus a gap. Secondary roots have no parent:
    the pull alone decides their x, which may be negative.
    """
    x = dict(initial_x)

    secondary_roots = sorted(
        (info for info in infos.values() if info.role is NodeRole.Root and info.id != primary_root_id),
        key=top_left_key,
    )
    splits = [infos[node_id] for node_id in reversed(order) if infos[node_id].role is NodeRole.Split]

    for info in secondary_roots + splits:
        pull = find_merge_pull_target(info.id, infos, row_of, x, ancestor_sets, chain_map, gap)
        if pull is None:
            continue

        if info.parents:
            final_x = max(_right(info.parents[0], x, infos) + gap, pull)
        else:
            final_x = pull
        if final_x == x[info.id]:
            continue

        logger.debug("Split pull: %s %s x %s -> %s", info.role.value, info.id, x[info.id], final_x)
        x[info.id] = final_x
        for child_id in info.children:
            propagate_sequential(child_id, final_x + info.width, x, infos, gap)

    return x


# ─── Merge Approach ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MergeApproach:
    """The last interior node of a chain feeding a higher-priority merge."""

    node_id: str
    end_id: str
    prev_id: str
    start_id: str


def build_merge_approach_map(
    infos: dict[str, NodeInfo],
    row_of: dict[str, int],
    chain_map: ChainMap,
) -> dict[str, MergeApproach]:
    """Map each merge-approach node id to its chain context."""
    approaches: dict[str, MergeApproach] = {}

    for info in infos.values():
        if not info.role.is_boundary:
            continue
        start_row = row_of.get(info.id, 0)

        for first_child_id in info.children:
            chain = chain_map[info.id][first_child_id]
            if len(chain) < 3:
                continue

            end_id = chain[-1]
            if not infos[end_id].role.is_merge_like:
                continue
            if row_of.get(end_id, 0) >= start_row:
                continue

            last_interior_id = chain[-2]
            if last_interior_id not in approaches:
                approaches[last_interior_id] = MergeApproach(
                    node_id=last_interior_id,
                    end_id=end_id,
                    prev_id=chain[-3],
                    start_id=info.id,
                )

    return approaches


# ─── Reconciliation ───────────────────────────────────────────────────────────


def reconcile_x_positions(
    infos: dict[str, NodeInfo],
    order: list[str],
    primary_root_id: str,
    x: dict[str, float],
    merge_approaches: dict[str, MergeApproach],
    ancestor_sets: dict[str, frozenset[str]],
    gap: float = GAP,
) -> dict[str, float]:
    """Recompute every non-fixed x against final upstream positions.

    Roots are fixed (Anchor / Split Pull). Splits keep their pulled x but never
    sit left of their parent's right edge plus a gap. Merge-approach nodes use
    their merge's x computed without the chain's own subtree, since that merge
    may itself be aligned on this node.
    """
    result = dict(x)

    for node_id in order:
        info = infos[node_id]
        if node_id == primary_root_id or info.role is NodeRole.Root:
            continue

        if info.role is NodeRole.Split:
            result[node_id] = max(result[node_id], _right(info.parents[0], result, infos) + gap)
            continue

        approach = merge_approaches.get(node_id)
        if approach is not None:
            prev_right = _right(approach.prev_id, result, infos)
            merge_x = compute_merge_x_excluding_subtree(
                approach.end_id, approach.start_id, infos, result, ancestor_sets, gap
            )
            if merge_x is None:
                result[node_id] = prev_right + gap
            else:
                result[node_id] = max(prev_right + gap, merge_x - info.width - gap)
            continue

        if info.role.is_merge_like:
            result[node_id] = _merge_alignment_x(info, result, infos, gap)
        elif len(info.parents) == 1:
            result[node_id] = _right(info.parents[0], result, infos) + gap

    return result
