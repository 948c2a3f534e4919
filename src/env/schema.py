# EnvProfile and section dataclasses
# src/env/schema.py

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class LoggingConfig:
    """Log level plus optional JSONL monitoring sink."""
    level: str = "INFO"
    events_log: Optional[Path] = None   # None disables the JSONL sink


@dataclass
class PathfinderConfig:
    """Limits applied to A* searches started from the CLI."""
    max_expansions: Optional[int] = None  # None = unbounded


@dataclass
class RepositoriesConfig:
    """Where repository summaries come from and where they are cached."""
    username: str
    api_url: str = "https://api.github.com"
    sort: str = "updated"
    limit: int = 6
    storage_key: str = "repositories"
    session_path: Path = Path(".session/repositories.json")
    timeout_s: float = 10.0
    token_env_var: str = "GITHUB_TOKEN"


@dataclass
class EnvProfile:
    """Resolved configuration for one run."""
    name: str
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    pathfinder: PathfinderConfig = field(default_factory=PathfinderConfig)
    repositories: Optional[RepositoriesConfig] = None
