# src/repositories/__init__.py
"""
Repository listing fetch/cache.

Provides:
- RepositoryStore: subscribable list, fetch-once-per-session, reset
- GitHubRepositorySource / EndpointFetcher: HTTP fetchers
- InMemorySessionStorage / JsonFileSessionStorage: session storage
"""

from __future__ import annotations

from .schema import RepositoryFetchError, RepositorySummary, parse_envelope
from .session import InMemorySessionStorage, JsonFileSessionStorage, SessionStorage
from .source import (
    EndpointFetcher,
    Fetcher,
    GitHubRepositorySource,
    HttpResponse,
    Transport,
    urllib_transport,
)
from .store import RepositoryStore

__all__ = [
    "RepositoryFetchError",
    "RepositorySummary",
    "parse_envelope",
    "InMemorySessionStorage",
    "JsonFileSessionStorage",
    "SessionStorage",
    "EndpointFetcher",
    "Fetcher",
    "GitHubRepositorySource",
    "HttpResponse",
    "Transport",
    "urllib_transport",
    "RepositoryStore",
]
