# rich rendering of grids and paths
# src/nav/render.py
"""
Draw a NavGrid with an optional path overlaid, as a rich Text block.

Used by the CLI to show search results.
"""

from __future__ import annotations

from typing import Iterable, Optional

from rich.text import Text

from .grid import Cell, NavGrid

WALL = "#"
FLOOR = "."
STEP = "*"
START = "S"
GOAL = "G"

_STYLES = {
    WALL: "bold white on grey23",
    FLOOR: "grey50",
    STEP: "bold yellow",
    START: "bold green",
    GOAL: "bold red",
}


def render_grid(
    grid: NavGrid,
    path: Iterable[Cell] = (),
    start: Optional[Cell] = None,
    goal: Optional[Cell] = None,
) -> Text:
    """
    Render the grid one row per line.

    Start and goal markers win over path markers, which win over floor.
    """
    steps = set(path)
    text = Text()

    for y, row in enumerate(grid.cells):
        for x, walkable in enumerate(row):
            cell = (x, y)
            if cell == start:
                glyph = START
            elif cell == goal:
                glyph = GOAL
            elif cell in steps:
                glyph = STEP
            else:
                glyph = FLOOR if walkable else WALL
            text.append(glyph, style=_STYLES[glyph])
        if y < grid.height - 1:
            text.append("\n")

    return text
