# src/app/runtime.py
"""
Wiring between configuration and the runtime objects the CLI needs.
"""

from __future__ import annotations

import logging
from typing import Optional

from env.schema import EnvProfile
from monitoring.bus import EventBus
from monitoring.logger import JsonFileLogger
from repositories.session import JsonFileSessionStorage
from repositories.source import GitHubRepositorySource, Transport, urllib_transport
from repositories.store import RepositoryStore

log = logging.getLogger(__name__)


def open_event_log(env: EnvProfile, bus: EventBus) -> Optional[JsonFileLogger]:
    """Attach the JSONL sink when logging.events_log is configured."""
    if env.logging.events_log is None:
        return None
    log.debug("Writing monitoring events to %s", env.logging.events_log)
    return JsonFileLogger(env.logging.events_log, bus)


def create_repository_store(
    env: EnvProfile,
    bus: Optional[EventBus] = None,
    transport: Optional[Transport] = None,
) -> RepositoryStore:
    """
    Build a RepositoryStore backed by the GitHub API and a session file.

    Raises ValueError if env.yaml has no 'repositories' section.
    """
    cfg = env.repositories
    if cfg is None:
        raise ValueError("env.yaml has no 'repositories' section")

    source = GitHubRepositorySource.from_config(cfg, transport=transport or urllib_transport)
    storage = JsonFileSessionStorage(cfg.session_path)
    return RepositoryStore(source, storage, storage_key=cfg.storage_key, bus=bus)
