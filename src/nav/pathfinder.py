# A* pathfinding over NavGrid
# src/nav/pathfinder.py
"""
A* pathfinding over NavGrid.

- Manhattan distance heuristic.
- 4-directional neighbors, every step costs 1.
- Frontier ties are broken by lower h, then by insertion order, so the
  same input always produces the same path.
- Optional max_expansions guard to bound huge searches.

Returned paths exclude the start cell and end at the goal.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .grid import Cell, InvalidEndpointError, NavGrid, as_grid, manhattan

log = logging.getLogger(__name__)

REASON_NO_PATH = "no_path_found"
REASON_BUDGET = "max_expansions_exhausted"


@dataclass
class SearchNode:
    """A cell annotated with A* bookkeeping. `parent` is a cell key, not a node."""

    cell: Cell
    g: int
    h: int
    parent: Optional[Cell] = None
    order: int = 0

    @property
    def f(self) -> int:
        return self.g + self.h

    def sort_key(self) -> Tuple[int, int, int]:
        return (self.f, self.h, self.order)


@dataclass
class PathfindingResult:
    """Structured result for a pathfinding attempt."""

    path: List[Cell]
    success: bool
    reason: str | None = None
    expansions: int = 0


@dataclass
class _OpenSet:
    """
    Binary-heap frontier with lazy deletion.

    The heap may hold stale entries for cells whose g was later improved;
    an entry is live only if its order matches the node stored in `nodes`.
    """

    nodes: Dict[Cell, SearchNode] = field(default_factory=dict)
    heap: List[Tuple[int, int, int, Cell]] = field(default_factory=list)
    counter: int = 0

    def push(self, node: SearchNode) -> None:
        node.order = self.counter
        self.counter += 1
        self.nodes[node.cell] = node
        f, h, order = node.sort_key()
        heapq.heappush(self.heap, (f, h, order, node.cell))

    def pop(self) -> Optional[SearchNode]:
        while self.heap:
            _, _, order, cell = heapq.heappop(self.heap)
            node = self.nodes.get(cell)
            if node is not None and node.order == order:
                del self.nodes[cell]
                return node
        return None

    def get(self, cell: Cell) -> Optional[SearchNode]:
        return self.nodes.get(cell)

    def __bool__(self) -> bool:
        return bool(self.nodes)


def _check_endpoint(grid: NavGrid, cell: Cell, label: str) -> Cell:
    try:
        x, y = cell
    except (TypeError, ValueError):
        raise InvalidEndpointError(f"{label} must be an (x, y) pair, got {cell!r}") from None
    if not isinstance(x, int) or not isinstance(y, int):
        raise InvalidEndpointError(f"{label} coordinates must be integers, got {cell!r}")
    if not grid.in_bounds((x, y)):
        raise InvalidEndpointError(
            f"{label} {(x, y)} is outside the {grid.width}x{grid.height} grid"
        )
    if not grid.is_walkable((x, y)):
        raise InvalidEndpointError(f"{label} {(x, y)} is on a blocked cell")
    return (x, y)


def find_path(
    grid: NavGrid | Sequence[Sequence[object]],
    start: Cell,
    goal: Cell,
    max_expansions: int | None = None,
) -> PathfindingResult:
    """
    A* search for a shortest path from start to goal.

    Returns a PathfindingResult with:
      - path: cells after start up to and including goal (empty if none)
      - success: bool
      - reason: if not success, "no_path_found" or "max_expansions_exhausted"
      - expansions: how many nodes were closed

    Raises GridError for a ragged grid and InvalidEndpointError when start
    or goal is out of bounds or blocked. The grid is never mutated.
    """
    nav = as_grid(grid)
    start = _check_endpoint(nav, start, "start")
    goal = _check_endpoint(nav, goal, "goal")

    if start == goal:
        return PathfindingResult(path=[], success=True)

    open_set = _OpenSet()
    open_set.push(SearchNode(cell=start, g=0, h=manhattan(start, goal)))

    # Arena of closed nodes, used to walk parent cells back to start.
    closed: Dict[Cell, SearchNode] = {}

    while open_set:
        current = open_set.pop()
        if current is None:
            break

        if current.cell == goal:
            path = _reconstruct_path(closed, current)
            log.debug(
                "A* found path %s -> %s of length %d after %d expansions",
                start, goal, len(path), len(closed),
            )
            return PathfindingResult(path=path, success=True, expansions=len(closed))

        # Reaching the goal never costs budget; only closing a node does.
        if max_expansions is not None and len(closed) >= max_expansions:
            log.debug("A* budget of %d expansions exhausted", max_expansions)
            return PathfindingResult(
                path=[], success=False, reason=REASON_BUDGET, expansions=len(closed)
            )

        closed[current.cell] = current

        for nxt in nav.neighbors_4dir(current.cell):
            if nxt in closed:
                continue

            tentative_g = current.g + 1
            known = open_set.get(nxt)

            # Decrease-key: only replace an open node on strict improvement.
            if known is None or tentative_g < known.g:
                open_set.push(
                    SearchNode(
                        cell=nxt,
                        g=tentative_g,
                        h=manhattan(nxt, goal),
                        parent=current.cell,
                    )
                )

    log.debug("A* found no path %s -> %s after %d expansions", start, goal, len(closed))
    return PathfindingResult(
        path=[], success=False, reason=REASON_NO_PATH, expansions=len(closed)
    )


def search(
    grid: NavGrid | Sequence[Sequence[object]],
    start: Cell,
    goal: Cell,
) -> List[Cell]:
    """
    Shortest path from start to goal, excluding start.

    Empty list when no path exists or start == goal. Callers that need
    the start cell must prepend it.
    """
    return find_path(grid, start, goal).path


def _reconstruct_path(closed: Dict[Cell, SearchNode], node: SearchNode) -> List[Cell]:
    """Follow parent cells from goal back to start; start itself is dropped."""
    path: List[Cell] = []
    while node.parent is not None:
        path.append(node.cell)
        node = closed[node.parent]
    path.reverse()
    return path
