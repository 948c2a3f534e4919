# src/nav/__init__.py
"""
Grid navigation.

Provides:
- NavGrid: rectangular traversability grid
- A* pathfinding: search (plain path) and find_path (structured result)
- render_grid: rich rendering of a grid with a path overlaid
"""

from __future__ import annotations

from .grid import (
    Cell,
    GridError,
    InvalidEndpointError,
    NavError,
    NavGrid,
    manhattan,
)
from .pathfinder import PathfindingResult, SearchNode, find_path, search
from .render import render_grid

__all__ = [
    "Cell",
    "GridError",
    "InvalidEndpointError",
    "NavError",
    "NavGrid",
    "manhattan",
    "PathfindingResult",
    "SearchNode",
    "find_path",
    "search",
    "render_grid",
]
