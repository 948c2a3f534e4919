#!/usr/bin/env python3
"""
portfolio-core command line.

Subcommands:
    path   Run A* over a text grid file and draw the result.
    repos  Show the cached / freshly fetched repository list.

Examples:
    portfolio-core path --grid maze.txt --start 0,0 --goal 9,4
    portfolio-core repos --reset
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from env.loader import LOG_LEVELS, load_environment, log_level, validate_env
from env.schema import EnvProfile
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from nav.grid import Cell, NavError, NavGrid
from nav.pathfinder import find_path
from nav.render import render_grid

from . import runtime
from .logging_config import configure_logging

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_PATH = 1
EXIT_BAD_INPUT = 2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_cell(text: str) -> Cell:
    """Parse "x,y" into a cell; used as an argparse type."""
    parts = text.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected X,Y, got {text!r}")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"coordinates must be integers, got {text!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-core",
        description="Grid A* pathfinding and repository listing tools",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Directory containing env.yaml (default: ./config of the project)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Override logging.level from env.yaml",
    )
    parser.add_argument(
        "--events-log",
        type=Path,
        default=None,
        help="Override logging.events_log (JSONL monitoring events)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    path_p = sub.add_parser("path", help="Find a shortest path on a text grid")
    path_p.add_argument("--grid", type=Path, required=True, help="Text grid file ('#' = wall)")
    path_p.add_argument("--start", type=parse_cell, required=True, help="Start cell as X,Y")
    path_p.add_argument("--goal", type=parse_cell, required=True, help="Goal cell as X,Y")
    path_p.add_argument(
        "--max-expansions",
        type=int,
        default=None,
        help="Override pathfinder.max_expansions",
    )

    repos_p = sub.add_parser("repos", help="List recently updated repositories")
    repos_p.add_argument(
        "--reset",
        action="store_true",
        help="Drop the session cache before fetching",
    )

    return parser


def _apply_overrides(env: EnvProfile, args: argparse.Namespace) -> None:
    """Copy command line overrides onto the loaded profile and re-validate it."""
    if args.log_level:
        env.logging.level = args.log_level
    if args.events_log is not None:
        env.logging.events_log = args.events_log
    if getattr(args, "max_expansions", None) is not None:
        env.pathfinder.max_expansions = args.max_expansions
    validate_env(env)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def run_path(args: argparse.Namespace, env: EnvProfile, bus: EventBus, console: Console) -> int:
    try:
        grid = NavGrid.from_text(args.grid.read_text(encoding="utf-8"))
    except OSError as exc:
        console.print(f"[red]Cannot read grid:[/red] {exc}")
        return EXIT_BAD_INPUT
    except NavError as exc:
        console.print(f"[red]Invalid grid:[/red] {exc}")
        return EXIT_BAD_INPUT

    try:
        result = find_path(grid, args.start, args.goal, max_expansions=env.pathfinder.max_expansions)
    except NavError as exc:
        console.print(f"[red]Invalid input:[/red] {exc}")
        return EXIT_BAD_INPUT

    payload = {
        "start": list(args.start),
        "goal": list(args.goal),
        "length": len(result.path),
        "expansions": result.expansions,
    }
    console.print(render_grid(grid, result.path, start=args.start, goal=args.goal))

    if result.success:
        log_event(bus, __name__, EventType.PATH_FOUND, "Path found", payload)
        console.print(
            f"[green]Path found:[/green] {len(result.path)} steps, "
            f"{result.expansions} expansions"
        )
        return EXIT_OK

    payload["reason"] = result.reason
    log_event(bus, __name__, EventType.PATH_NOT_FOUND, "No path", payload)
    console.print(f"[yellow]No path:[/yellow] {result.reason}")
    return EXIT_NO_PATH


def run_repos(args: argparse.Namespace, env: EnvProfile, bus: EventBus, console: Console) -> int:
    try:
        store = runtime.create_repository_store(env, bus)
    except ValueError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return EXIT_BAD_INPUT

    if args.reset:
        store.reset_cache()

    repos = store.fetch_repositories()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Repository", style="bold")
    table.add_column("Language")
    table.add_column("Stars", justify="right")
    table.add_column("Updated")
    for repo in repos:
        table.add_row(
            repo.name,
            repo.language or "-",
            str(repo.stargazers_count),
            repo.updated_at or "-",
        )
    console.print(table)

    if not repos:
        console.print("[yellow]No repositories available.[/yellow]")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: Optional[List[str]] = None, console: Optional[Console] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    console = console or Console()

    try:
        env = load_environment(args.config)
        _apply_overrides(env, args)
    except (FileNotFoundError, KeyError, ValueError) as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        return EXIT_BAD_INPUT

    configure_logging(log_level(env))

    bus = EventBus()
    sink = runtime.open_event_log(env, bus)
    log.debug("Running %r with profile %r", args.command, env.name)
    try:
        if args.command == "path":
            return run_path(args, env, bus, console)
        return run_repos(args, env, bus, console)
    finally:
        if sink is not None:
            sink.close()


if __name__ == "__main__":
    sys.exit(main())
