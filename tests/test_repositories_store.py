# tests/test_repositories_store.py
"""
Tests for repositories.store.RepositoryStore.

Covers:
- Fetch at most once per session
- reset_cache re-arms fetching and clears storage
- Every failure mode surfaces the current list instead of raising,
  including unexpected exceptions from the fetcher or the storage
- Session cache loading (valid and corrupt)
- Subscriber notifications and monitoring events
- Concurrent fetches reach the fetcher once
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List

import pytest

from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from repositories import (
    GitHubRepositorySource,
    HttpResponse,
    InMemorySessionStorage,
    JsonFileSessionStorage,
    RepositoryFetchError,
    RepositoryStore,
    RepositorySummary,
)
from repositories.schema import summaries_to_cache
from repositories.testing.fakes import StaticFetcher, envelope, repo


def ok_fetcher(*names: str) -> StaticFetcher:
    return StaticFetcher(response=HttpResponse(200, envelope([repo(n) for n in names])))


def test_fetch_sets_value_and_persists():
    storage = InMemorySessionStorage()
    fetcher = ok_fetcher("alpha", "beta")
    store = RepositoryStore(fetcher, storage)

    repos = store.fetch_repositories()

    assert [r.name for r in repos] == ["alpha", "beta"]
    assert [r.name for r in store.value] == ["alpha", "beta"]
    assert store.fetched
    assert '"alpha"' in storage.get_item("repositories")


def test_fetches_at_most_once_per_session():
    fetcher = ok_fetcher("alpha")
    store = RepositoryStore(fetcher)

    store.fetch_repositories()
    store.fetch_repositories()
    store.fetch_repositories()

    assert fetcher.calls == 1


def test_reset_cache_clears_and_allows_refetch():
    storage = InMemorySessionStorage()
    fetcher = ok_fetcher("alpha")
    store = RepositoryStore(fetcher, storage)
    store.fetch_repositories()

    store.reset_cache()

    assert store.value == []
    assert not store.fetched
    assert storage.get_item("repositories") is None

    store.fetch_repositories()
    assert fetcher.calls == 2


@pytest.mark.parametrize(
    "fetcher",
    [
        StaticFetcher(response=HttpResponse(500, envelope([repo("alpha")]))),
        StaticFetcher(response=HttpResponse(404, b"")),
        StaticFetcher(response=HttpResponse(200, b"")),
        StaticFetcher(response=HttpResponse(200, b"   ")),
        StaticFetcher(response=HttpResponse(200, b"{not json")),
        StaticFetcher(response=HttpResponse(200, b"[]")),
        StaticFetcher(response=HttpResponse(200, b'{"success": true}')),
        StaticFetcher(response=HttpResponse(200, b'{"success": false, "repositories": []}')),
        StaticFetcher(response=HttpResponse(200, b'{"repositories": [{"full_name": "x"}]}')),
        StaticFetcher(error=RepositoryFetchError("connection refused")),
    ],
)
def test_fetch_failure_surfaces_empty_list(fetcher: StaticFetcher):
    storage = InMemorySessionStorage()
    store = RepositoryStore(fetcher, storage)

    assert store.fetch_repositories() == []
    assert store.value == []
    assert not store.fetched
    assert storage.get_item("repositories") is None


def test_failed_fetch_is_retried_on_next_call():
    fetcher = StaticFetcher(response=HttpResponse(503, b""))
    store = RepositoryStore(fetcher)
    store.fetch_repositories()

    fetcher.response = HttpResponse(200, envelope([repo("alpha")]))

    assert [r.name for r in store.fetch_repositories()] == ["alpha"]
    assert fetcher.calls == 2


def test_cached_session_data_loaded_on_construction():
    cached = [RepositorySummary(name="cached", full_name="me/cached", html_url="u")]
    storage = InMemorySessionStorage({"repositories": summaries_to_cache(cached)})
    fetcher = ok_fetcher("fresh")

    store = RepositoryStore(fetcher, storage)

    assert store.value == cached
    assert fetcher.calls == 0


def test_failure_keeps_cached_session_data():
    cached = [RepositorySummary(name="cached", full_name="me/cached", html_url="u")]
    storage = InMemorySessionStorage({"repositories": summaries_to_cache(cached)})
    store = RepositoryStore(StaticFetcher(response=HttpResponse(500, b"")), storage)

    assert store.fetch_repositories() == cached


def test_corrupt_cache_is_discarded():
    storage = InMemorySessionStorage({"repositories": "{broken"})

    store = RepositoryStore(ok_fetcher("alpha"), storage)

    assert store.value == []
    assert storage.get_item("repositories") is None


def test_custom_storage_key():
    storage = InMemorySessionStorage()
    store = RepositoryStore(ok_fetcher("alpha"), storage, storage_key="repos:v2")

    store.fetch_repositories()

    assert storage.get_item("repos:v2") is not None
    assert storage.get_item("repositories") is None


def test_session_survives_new_store_with_file_storage(tmp_path: Path):
    path = tmp_path / "session" / "repos.json"
    RepositoryStore(ok_fetcher("alpha", "beta"), JsonFileSessionStorage(path)).fetch_repositories()

    failing = StaticFetcher(error=RepositoryFetchError("offline"))
    second = RepositoryStore(failing, JsonFileSessionStorage(path))

    assert [r.name for r in second.value] == ["alpha", "beta"]


def test_subscribers_see_initial_value_and_updates():
    store = RepositoryStore(ok_fetcher("alpha"))
    seen: List[List[str]] = []

    unsubscribe = store.subscribe(lambda repos: seen.append([r.name for r in repos]))
    store.fetch_repositories()
    store.reset_cache()
    unsubscribe()
    store.fetch_repositories()

    assert seen == [[], ["alpha"], []]


def test_monitoring_events_published():
    bus = EventBus()
    events: List[MonitoringEvent] = []
    bus.subscribe(events.append)

    fetcher = StaticFetcher(response=HttpResponse(500, b""))
    store = RepositoryStore(fetcher, bus=bus)

    store.fetch_repositories()
    fetcher.response = HttpResponse(200, envelope([repo("alpha")]))
    store.fetch_repositories()
    store.reset_cache()

    assert [e.event_type for e in events] == [
        EventType.REPOSITORIES_FETCH_FAILED,
        EventType.REPOSITORIES_FETCHED,
        EventType.REPOSITORIES_CACHE_RESET,
    ]
    assert events[0].payload["reason"] == "HTTP 500"
    assert events[1].payload["count"] == 1


class ReadOnlyStorage(InMemorySessionStorage):
    def set_item(self, key: str, value: str) -> None:
        raise OSError("read-only file system")

    def remove_item(self, key: str) -> None:
        raise OSError("read-only file system")


@pytest.mark.parametrize(
    "error",
    [
        ConnectionError("connection reset by peer"),
        TimeoutError("timed out"),
        ValueError("unknown url type"),
        KeyError("repositories"),
    ],
)
def test_unexpected_fetcher_exception_surfaces_current_list(error: Exception):
    storage = InMemorySessionStorage()
    fetcher = StaticFetcher(error=error)
    store = RepositoryStore(fetcher, storage)

    assert store.fetch_repositories() == []
    assert not store.fetched
    assert storage.get_item("repositories") is None

    fetcher.error = None
    fetcher.response = HttpResponse(200, envelope([repo("alpha")]))
    assert [r.name for r in store.fetch_repositories()] == ["alpha"]


def test_unexpected_exception_reported_as_event():
    bus = EventBus()
    events: List[MonitoringEvent] = []
    bus.subscribe(events.append)
    store = RepositoryStore(StaticFetcher(error=ConnectionError("reset")), bus=bus)

    store.fetch_repositories()

    assert [e.event_type for e in events] == [EventType.REPOSITORIES_FETCH_FAILED]
    assert events[0].payload["reason"] == "ConnectionError: reset"


def test_schemeless_api_url_does_not_raise():
    # urllib rejects the URL before opening a connection.
    source = GitHubRepositorySource("octocat", api_url="api.github.com")
    store = RepositoryStore(source)

    assert store.fetch_repositories() == []
    assert not store.fetched


def test_storage_write_failure_still_returns_fetched_list():
    store = RepositoryStore(ok_fetcher("alpha", "beta"), ReadOnlyStorage())

    repos = store.fetch_repositories()

    assert [r.name for r in repos] == ["alpha", "beta"]
    assert [r.name for r in store.value] == ["alpha", "beta"]
    assert store.fetched


def test_storage_remove_failure_still_resets():
    fetcher = ok_fetcher("alpha")
    store = RepositoryStore(fetcher, ReadOnlyStorage())
    store.fetch_repositories()

    store.reset_cache()

    assert store.value == []
    assert not store.fetched


class SlowFetcher:
    """Blocks inside the fetch until released, counting calls."""

    def __init__(self) -> None:
        self.calls = 0
        self.entered = threading.Event()
        self.release = threading.Event()

    def __call__(self) -> HttpResponse:
        self.calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        return HttpResponse(200, envelope([repo("alpha")]))


def test_concurrent_fetches_hit_fetcher_once():
    fetcher = SlowFetcher()
    store = RepositoryStore(fetcher)
    results: List[List[str]] = []

    def worker() -> None:
        results.append([r.name for r in store.fetch_repositories()])

    first = threading.Thread(target=worker)
    first.start()
    assert fetcher.entered.wait(timeout=5)

    others = [threading.Thread(target=worker) for _ in range(3)]
    for t in others:
        t.start()
    fetcher.release.set()
    for t in [first, *others]:
        t.join(timeout=5)

    assert fetcher.calls == 1
    assert results == [["alpha"]] * 4


def test_subscriber_may_call_back_into_store_during_fetch():
    fetcher = ok_fetcher("alpha")
    store = RepositoryStore(fetcher)
    seen: List[int] = []

    def on_change(repos: List[RepositorySummary]) -> None:
        if repos:
            seen.append(len(store.fetch_repositories()))

    store.subscribe(on_change)
    store.fetch_repositories()

    assert seen == [1]
    assert fetcher.calls == 1
