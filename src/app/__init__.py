# src/app/__init__.py
"""
Application entrypoints.

Exposes:
- main: the `portfolio-core` CLI
- configure_logging: root logger setup
"""

from __future__ import annotations

from .cli import main
from .logging_config import configure_logging

__all__ = [
    "main",
    "configure_logging",
]
