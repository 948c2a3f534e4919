# cached repository list
# src/repositories/store.py
"""
RepositoryStore: a subscribable list of RepositorySummary records.

Behaviour:
- On construction, the last successful result is loaded from session
  storage (key "repositories" by default).
- fetch_repositories() hits the fetcher at most once per session; a
  success replaces the list and persists it.
- Any failure (transport error, non-2xx status, empty body, malformed JSON,
  missing "repositories" key, or an unexpected exception from the fetcher)
  is logged and swallowed: callers get the
  current list, which is empty unless a session cache was loaded. The
  session stays unfetched so the next call retries.
- reset_cache() empties the list, drops the storage key and re-arms
  fetching.
"""

from __future__ import annotations

import logging
from threading import Lock, RLock
from typing import Callable, List, Optional

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

from .schema import (
    RepositoryFetchError,
    RepositorySummary,
    parse_envelope,
    summaries_from_cache,
    summaries_to_cache,
)
from .session import InMemorySessionStorage, SessionStorage
from .source import Fetcher

log = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "repositories"

Subscriber = Callable[[List[RepositorySummary]], None]


class RepositoryStore:
    def __init__(
        self,
        fetcher: Fetcher,
        storage: Optional[SessionStorage] = None,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._fetcher = fetcher
        self._storage: SessionStorage = storage if storage is not None else InMemorySessionStorage()
        self._key = storage_key
        self._bus = bus

        self._lock = Lock()
        # Held across check-fetch-set of _fetched and across reset.
        # Re-entrant because subscribers run while it is held.
        self._fetch_lock = RLock()
        self._repositories: List[RepositorySummary] = []
        self._subscribers: List[Subscriber] = []
        self._fetched = False

        self._load_cached()

    # ------------------------------------------------------------------
    # Store surface
    # ------------------------------------------------------------------

    @property
    def value(self) -> List[RepositorySummary]:
        with self._lock:
            return list(self._repositories)

    @property
    def fetched(self) -> bool:
        return self._fetched

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """
        Call `fn` with the current list now and after every change.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(fn)
            current = list(self._repositories)
        fn(current)

        def unsubscribe() -> None:
            with self._lock:
                if fn in self._subscribers:
                    self._subscribers.remove(fn)

        return unsubscribe

    def set(self, repositories: List[RepositorySummary]) -> None:
        with self._lock:
            self._repositories = list(repositories)
            subscribers = list(self._subscribers)
            current = list(self._repositories)
        for fn in subscribers:
            fn(current)

    # ------------------------------------------------------------------
    # Fetch / cache
    # ------------------------------------------------------------------

    def fetch_repositories(self) -> List[RepositorySummary]:
        """
        Fetch once per session; never raises.

        Concurrent callers are serialised on the fetch lock, so only the
        first one reaches the fetcher.
        """
        with self._fetch_lock:
            if self._fetched:
                return self.value

            try:
                response = self._fetcher()
                if not response.ok:
                    raise RepositoryFetchError(f"HTTP {response.status}")
                repositories = parse_envelope(response.body)
            except RepositoryFetchError as exc:
                self._report_failure(str(exc))
                return self.value
            except Exception as exc:
                log.exception("Unexpected error while fetching repositories")
                self._report_failure(f"{type(exc).__name__}: {exc}")
                return self.value

            self._persist(repositories)
            self._fetched = True
            self.set(repositories)

        log.info("Fetched %d repositories", len(repositories))
        log_event(
            bus=self._bus,
            module=__name__,
            event_type=EventType.REPOSITORIES_FETCHED,
            message="Fetched repositories",
            payload={"count": len(repositories), "names": [r.name for r in repositories]},
        )
        return self.value

    def reset_cache(self) -> None:
        with self._fetch_lock:
            self.set([])
            try:
                self._storage.remove_item(self._key)
            except Exception as exc:
                log.warning("Could not remove cached repositories under %r: %s", self._key, exc)
            self._fetched = False
        log_event(
            bus=self._bus,
            module=__name__,
            event_type=EventType.REPOSITORIES_CACHE_RESET,
            message="Repository cache reset",
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load_cached(self) -> None:
        raw = self._storage.get_item(self._key)
        if not raw:
            return
        try:
            cached = summaries_from_cache(raw)
        except RepositoryFetchError as exc:
            log.warning("Discarding cached repositories under %r: %s", self._key, exc)
            self._storage.remove_item(self._key)
            return
        self._repositories = cached
        log.debug("Loaded %d cached repositories", len(cached))

    def _persist(self, repositories: List[RepositorySummary]) -> None:
        # The in-memory list stays authoritative when storage is unavailable.
        try:
            self._storage.set_item(self._key, summaries_to_cache(repositories))
        except Exception as exc:
            log.warning("Could not persist repositories under %r: %s", self._key, exc)

    def _report_failure(self, reason: str) -> None:
        log.error("Error fetching repositories: %s", reason)
        log_event(
            bus=self._bus,
            module=__name__,
            event_type=EventType.REPOSITORIES_FETCH_FAILED,
            message="Repository fetch failed",
            payload={"reason": reason},
        )
