# HTTP sources for repository listings
# src/repositories/source.py
"""
Fetchers that produce a repository-listing HTTP response.

A fetcher is any zero-argument callable returning HttpResponse whose body is
the `{"success": true, "repositories": [...]}` envelope. Two are provided:

- EndpointFetcher: GET an endpoint that already serves the envelope
  (e.g. the site's own `/api/repositories` route).
- GitHubRepositorySource: talk to the GitHub REST API directly and build the
  envelope the same way that route does (most recently updated first,
  first `limit` entries).

The network call goes through a Transport so tests can swap it out.
"""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional

from .schema import RepositoryFetchError

log = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


# Transport signature: transport(url, headers, timeout_s) -> HttpResponse
Transport = Callable[[str, Mapping[str, str], float], HttpResponse]
Fetcher = Callable[[], HttpResponse]


def urllib_transport(url: str, headers: Mapping[str, str], timeout_s: float) -> HttpResponse:
    """
    Blocking GET via urllib.

    HTTP error statuses come back as responses; connection failures raise
    RepositoryFetchError.
    """
    request = urllib.request.Request(url, headers=dict(headers), method="GET")
    try:
        with urllib.request.urlopen(request, timeout=timeout_s) as resp:
            return HttpResponse(
                status=resp.status,
                body=resp.read(),
                headers={k.lower(): v for k, v in resp.headers.items()},
            )
    except urllib.error.HTTPError as exc:
        return HttpResponse(
            status=exc.code,
            body=exc.read() or b"",
            headers={k.lower(): v for k, v in (exc.headers or {}).items()},
        )
    except (urllib.error.URLError, OSError) as exc:
        raise RepositoryFetchError(f"GET {url} failed: {exc}") from exc


class EndpointFetcher:
    """GET a URL that already returns the repositories envelope."""

    def __init__(
        self,
        url: str,
        transport: Transport = urllib_transport,
        timeout_s: float = 10.0,
    ) -> None:
        self.url = url
        self._transport = transport
        self._timeout_s = timeout_s

    def __call__(self) -> HttpResponse:
        return self._transport(self.url, {"Accept": "application/json"}, self._timeout_s)


class GitHubRepositorySource:
    """
    List a user's repositories from the GitHub REST API.

    Produces the same envelope as the site's proxy route:
    `{"success": true, "repositories": [<first `limit` repos>]}`.
    Upstream error statuses are passed through unchanged.
    """

    def __init__(
        self,
        username: str,
        token: Optional[str] = None,
        *,
        api_url: str = "https://api.github.com",
        sort: str = "updated",
        limit: int = 6,
        transport: Transport = urllib_transport,
        timeout_s: float = 10.0,
    ) -> None:
        if not username:
            raise ValueError("username is required")
        self.username = username
        self._token = token
        self.api_url = api_url.rstrip("/")
        self.sort = sort
        self.limit = limit
        self._transport = transport
        self._timeout_s = timeout_s

    @classmethod
    def from_config(cls, cfg, transport: Transport = urllib_transport) -> "GitHubRepositorySource":
        """Build from env.schema.RepositoriesConfig; the token comes from the environment."""
        return cls(
            username=cfg.username,
            token=os.getenv(cfg.token_env_var) or None,
            api_url=cfg.api_url,
            sort=cfg.sort,
            limit=cfg.limit,
            transport=transport,
            timeout_s=cfg.timeout_s,
        )

    @property
    def url(self) -> str:
        user = urllib.parse.quote(self.username, safe="")
        query = urllib.parse.urlencode({"sort": self.sort})
        return f"{self.api_url}/users/{user}/repos?{query}"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def __call__(self) -> HttpResponse:
        upstream = self._transport(self.url, self._headers(), self._timeout_s)
        if not upstream.ok:
            log.warning("GitHub listing for %s returned HTTP %d", self.username, upstream.status)
            return upstream

        try:
            repos = json.loads(upstream.body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RepositoryFetchError(f"Malformed upstream JSON: {exc}") from exc
        if not isinstance(repos, list):
            raise RepositoryFetchError("GitHub listing is not a JSON array")

        envelope = {"success": True, "repositories": repos[: self.limit]}
        return HttpResponse(
            status=200,
            body=json.dumps(envelope).encode("utf-8"),
            headers={"content-type": "application/json"},
        )
