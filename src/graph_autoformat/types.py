"""Layout types shared across the autoformat passes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Right-edge-to-next-left-edge gap, in layout units. Also used as the vertical
# gap between rows and between stacked islands.
GAP: int = 30


class NodeRole(Enum):
    """Structural role of a node, derived purely from its in/out degree."""

    Root = "root"
    Leaf = "leaf"
    Simple = "simple"
    Split = "split"
    Merge = "merge"
    MergeSplit = "merge-split"

    @classmethod
    def classify(cls, n_parents: int, n_children: int) -> NodeRole:
        if n_parents == 0:
            return cls.Root
        if n_parents > 1 and n_children > 1:
            return cls.MergeSplit
        if n_parents > 1:
            return cls.Merge
        if n_children > 1:
            return cls.Split
        if n_children == 0:
            return cls.Leaf
        return cls.Simple

    @property
    def is_merge_like(self) -> bool:
        return self in (NodeRole.Merge, NodeRole.MergeSplit)

    @property
    def is_boundary(self) -> bool:
        """Chains run between boundary nodes; simple nodes are chain interiors."""
        return self is not NodeRole.Simple


@dataclass(frozen=True)
class NodeInfo:
    """Topology snapshot of one node, built once per layout call."""

    id: str
    role: NodeRole
    parents: tuple[str, ...]
    children: tuple[str, ...]
    initial_x: float
    initial_y: float
    width: float
    height: float


@dataclass(frozen=True)
class Point:
    """A 2D position in layout units."""

    x: float
    y: float


@dataclass
class LayoutNode:
    """A positioned node in the layout.

    ``row`` is the node's row index inside its own island; rows of different
    islands are not comparable.
    """

    id: str
    x: float
    y: float
    row: int
    width: float
    height: float


# chain map: start boundary id -> first child id -> [start, interior..., end]
ChainMap = dict[str, dict[str, list[str]]]
