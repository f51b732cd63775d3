"""Regression cases: stored graphs with their expected tidy positions.

A case directory holds ``index.json`` (the ordered list of case ids) and one
``<id>.json`` file per case::

    {"id": ..., "title": ..., "initial": {"nodes": ..., "edges": ...},
     "expected": {"<node id>": {"x": ..., "y": ...}, ...}}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from graph_autoformat.engine import analyze_layout
from graph_autoformat.exceptions import CaseFormatError
from graph_autoformat.types import GAP

logger = logging.getLogger(__name__)

INDEX_FILE = "index.json"


@dataclass
class LayoutCase:
    """A graph as the user left it, plus where autoformat must put each node."""

    id: str
    initial: dict[str, Any]
    expected: dict[str, dict[str, float]]
    title: str = ""

    @property
    def description(self) -> str:
        return self.title or self.id

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id}
        if self.title:
            data["title"] = self.title
        data["initial"] = self.initial
        data["expected"] = self.expected
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: str = "<case>") -> LayoutCase:
        for key in ("id", "initial", "expected"):
            if key not in data:
                raise CaseFormatError(source, f"missing '{key}'")
        if not isinstance(data["expected"], Mapping):
            raise CaseFormatError(source, "'expected' must map node ids to positions")
        return cls(
            id=data["id"],
            initial=data["initial"],
            expected={node_id: dict(pos) for node_id, pos in data["expected"].items()},
            title=data.get("title", ""),
        )


@dataclass
class CaseMismatch:
    """One coordinate where the current layout disagrees with a case."""

    node_id: str
    axis: str
    expected: float
    actual: float | None = None


def check_case(case: LayoutCase, axes: tuple[str, ...] = ("x", "y"), gap: float = GAP) -> list[CaseMismatch]:
    """Lay out ``case.initial`` and list every expected coordinate it misses."""
    layout = analyze_layout(case.initial, gap)
    mismatches: list[CaseMismatch] = []
    for node_id, expected in case.expected.items():
        node = layout.get(node_id)
        for axis in axes:
            actual = getattr(node, axis) if node is not None else None
            if actual != expected[axis]:
                mismatches.append(CaseMismatch(node_id=node_id, axis=axis, expected=expected[axis], actual=actual))
    return mismatches


def record_case(case_id: str, graph: Mapping[str, Any], title: str = "", gap: float = GAP) -> LayoutCase:
    """Capture the current layout of ``graph`` as a new regression case."""
    layout = analyze_layout(graph, gap)
    expected = {node_id: {"x": node.x, "y": node.y} for node_id, node in layout.items()}
    return LayoutCase(id=case_id, initial=dict(graph), expected=expected, title=title)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CaseFormatError(str(path), f"invalid JSON: {exc}") from exc


def load_cases(directory: str | Path) -> list[LayoutCase]:
    """Load the cases listed in ``index.json``, in index order.

    Ids without a case file are skipped. A missing index means no cases.
    """
    directory = Path(directory)
    index_path = directory / INDEX_FILE
    if not index_path.exists():
        return []

    ids = _read_json(index_path)
    if not isinstance(ids, list):
        raise CaseFormatError(str(index_path), "index must be a list of case ids")

    cases: list[LayoutCase] = []
    for case_id in ids:
        path = directory / f"{case_id}.json"
        if not path.exists():
            logger.warning("Case %s listed in %s but %s is missing", case_id, index_path, path.name)
            continue
        cases.append(LayoutCase.from_dict(_read_json(path), source=str(path)))
    return cases


def save_cases(directory: str | Path, cases: list[LayoutCase]) -> None:
    """Replace the stored case set with ``cases``.

    Files of ids dropped from the previous index are deleted, every case file
    is rewritten, and ``index.json`` lists the new ids in order.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    index_path = directory / INDEX_FILE

    new_ids = [case.id for case in cases]
    old_ids: list[str] = _read_json(index_path) if index_path.exists() else []
    for old_id in old_ids:
        if old_id not in new_ids:
            stale = directory / f"{old_id}.json"
            if stale.exists():
                stale.unlink()
                logger.info("Removed stale case %s", old_id)

    for case in cases:
        (directory / f"{case.id}.json").write_text(json.dumps(case.to_dict(), indent=2) + "\n", encoding="utf-8")
    index_path.write_text(json.dumps(new_ids, indent=2) + "\n", encoding="utf-8")
    logger.info("Saved %d case(s) to %s", len(cases), directory)
