# path: src/monitoring/events.py
"""
Event schema for monitoring.

This module defines:
- EventType enum
- MonitoringEvent (structured system events)

All events are JSON-serializable via `.to_dict()` and are intended
for use with monitoring.bus.EventBus and monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted by the pathfinder and repository store."""

    # Pathfinding outcomes
    PATH_FOUND = auto()
    PATH_NOT_FOUND = auto()

    # Repository store lifecycle
    REPOSITORIES_FETCHED = auto()
    REPOSITORIES_FETCH_FAILED = auto()
    REPOSITORIES_CACHE_RESET = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the CLI, the pathfinder wrapper or the
    repository store.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module string ("repositories.store", "app.cli", etc.)
    event_type: EventType       # Enum describing the event class
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (path length, status code, counts)
    correlation_id: Optional[str] = None  # Used for grouping related events

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
