# boolean traversability grid
# src/nav/grid.py
"""
NavGrid: rectangular 2-D traversability grid.

This module only answers geometric questions:
- Is a cell inside the grid?
- Can the cell be stood on?
- Which orthogonal neighbors are reachable in one step?

Rows are indexed by y, columns by x. Anything outside the grid counts
as blocked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

# (x, y) integer coordinates
Cell = Tuple[int, int]

# Neighbor order: up, right, down, left
DIRECTIONS_4: Tuple[Cell, ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))


class NavError(ValueError):
    """Base class for invalid pathfinding input."""


class GridError(NavError):
    """Raised when a grid is not a rectangular boolean matrix."""


class InvalidEndpointError(NavError):
    """Raised when a start or goal cell is out of bounds or blocked."""


def manhattan(a: Cell, b: Cell) -> int:
    """Manhattan distance between two cells."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass(frozen=True)
class NavGrid:
    """
    Immutable traversability matrix.

    `cells[y][x]` is True when the cell can be walked on. Build instances
    with `from_rows` or `from_text` so the rectangular shape is checked.
    """

    cells: Tuple[Tuple[bool, ...], ...]

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[object]]) -> "NavGrid":
        """
        Build a grid from any iterable of rows, coercing values to bool.

        Raises GridError for ragged rows or non-sequence rows.
        """
        frozen: List[Tuple[bool, ...]] = []
        width: int | None = None

        for y, row in enumerate(rows):
            if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
                raise GridError(f"Row {y} is not a sequence: {row!r}")
            if width is None:
                width = len(row)
            elif len(row) != width:
                raise GridError(
                    f"Grid must be rectangular: row {y} has {len(row)} cells, expected {width}"
                )
            frozen.append(tuple(bool(v) for v in row))

        return cls(cells=tuple(frozen))

    @classmethod
    def from_text(cls, text: str, blocked: str = "#") -> "NavGrid":
        """
        Parse a text map: one row per line, `blocked` characters are walls
        and any other character is floor. Blank lines are skipped.

            ..#
            ..#
            ...
        """
        lines = [line.rstrip("\r") for line in text.splitlines() if line.strip()]
        return cls.from_rows([[ch not in blocked for ch in line] for line in lines])

    @classmethod
    def open(cls, width: int, height: int) -> "NavGrid":
        """Fully traversable grid of the given size."""
        if width < 0 or height < 0:
            raise GridError(f"Grid size must be non-negative, got {width}x{height}")
        return cls(cells=tuple(tuple(True for _ in range(width)) for _ in range(height)))

    # ------------------------------------------------------------------
    # Core queries
    # ------------------------------------------------------------------

    @property
    def height(self) -> int:
        return len(self.cells)

    @property
    def width(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def is_walkable(self, cell: Cell) -> bool:
        """True if the cell is inside the grid and traversable."""
        if not self.in_bounds(cell):
            return False
        x, y = cell
        return self.cells[y][x]

    def neighbors_4dir(self, cell: Cell) -> List[Cell]:
        """
        Walkable orthogonal neighbors of `cell`, in up/right/down/left order.
        """
        x, y = cell
        out: List[Cell] = []
        for dx, dy in DIRECTIONS_4:
            nxt = (x + dx, y + dy)
            if self.is_walkable(nxt):
                out.append(nxt)
        return out

    def to_text(self, blocked: str = "#", floor: str = ".") -> str:
        return "\n".join(
            "".join(floor if v else blocked for v in row) for row in self.cells
        )


def as_grid(grid: "NavGrid | Sequence[Sequence[object]]") -> NavGrid:
    """Accept either a NavGrid or a raw matrix of booleans."""
    if isinstance(grid, NavGrid):
        return grid
    return NavGrid.from_rows(grid)
