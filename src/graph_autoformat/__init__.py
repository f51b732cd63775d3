"""Automatic tidy layout for directed node-and-port graphs."""

from __future__ import annotations

from graph_autoformat.cases import LayoutCase, check_case, load_cases, record_case, save_cases
from graph_autoformat.engine import analyze_layout, autoformat, compute_positions, layout_island
from graph_autoformat.exceptions import CaseFormatError, CyclicGraphError, GraphValidationError
from graph_autoformat.graph import Edge, Endpoint, GraphIR, NodeBox
from graph_autoformat.intervals import IntervalStructure
from graph_autoformat.types import GAP, LayoutNode, NodeInfo, NodeRole, Point

__all__ = [
    "GAP",
    "CaseFormatError",
    "CyclicGraphError",
    "Edge",
    "Endpoint",
    "GraphIR",
    "GraphValidationError",
    "IntervalStructure",
    "LayoutCase",
    "LayoutNode",
    "NodeBox",
    "NodeInfo",
    "NodeRole",
    "Point",
    "analyze_layout",
    "autoformat",
    "check_case",
    "compute_positions",
    "layout_island",
    "load_cases",
    "record_case",
    "save_cases",
]
