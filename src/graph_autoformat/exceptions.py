"""Exceptions raised while validating graphs and regression cases."""

from __future__ import annotations


class GraphValidationError(ValueError):
    """Input graph cannot be laid out.

    Raised before any layout pass runs, so a layout either completes for every
    node or does not start at all.

    Attributes:
        problems: One human-readable line per invalid node or edge
        message: Human-readable error message
    """

    def __init__(self, problems: list[str], message: str | None = None) -> None:
        self.problems = problems
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        if len(self.problems) == 1:
            return f"Invalid graph: {self.problems[0]}"
        lines = "\n".join(f"  - {p}" for p in self.problems)
        return f"Invalid graph ({len(self.problems)} problems):\n{lines}"


class CyclicGraphError(GraphValidationError):
    """Graph contains a directed cycle (self-loops included).

    Attributes:
        cycle: The (source, target) edges forming one offending cycle
    """

    def __init__(self, cycle: list[tuple[str, str]]) -> None:
        self.cycle = cycle
        path = " -> ".join([src for src, _ in cycle] + [cycle[0][0]]) if cycle else ""
        super().__init__([f"cycle {path}"], message=f"Graph contains a cycle: {path}")


class CaseFormatError(ValueError):
    """A stored regression case file is malformed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
