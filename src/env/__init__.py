# src/env/__init__.py
"""YAML-backed configuration."""

from .loader import load_environment
from .schema import EnvProfile, LoggingConfig, PathfinderConfig, RepositoriesConfig

__all__ = [
    "load_environment",
    "EnvProfile",
    "LoggingConfig",
    "PathfinderConfig",
    "RepositoriesConfig",
]
