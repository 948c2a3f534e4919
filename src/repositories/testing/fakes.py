# src/repositories/testing/fakes.py
"""
Test helpers for the repositories package.

Provides:
- FakeTransport: records requests and replays canned HttpResponses.
- StaticFetcher: zero-argument fetcher with a call counter.
- envelope(): build a proxy-style response body.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..source import HttpResponse


def envelope(repos: Sequence[Mapping[str, Any]], success: bool = True) -> bytes:
    return json.dumps({"success": success, "repositories": list(repos)}).encode("utf-8")


def repo(name: str, **extra: Any) -> Dict[str, Any]:
    """Minimal GitHub-style repository entry."""
    data: Dict[str, Any] = {
        "name": name,
        "full_name": f"octocat/{name}",
        "html_url": f"https://github.com/octocat/{name}",
    }
    data.update(extra)
    return data


@dataclass
class SentRequest:
    url: str
    headers: Dict[str, str]
    timeout_s: float


class FakeTransport:
    """
    In-memory Transport. Each call pops the next queued response (or
    raises it, if it is an exception); the last one repeats.
    """

    def __init__(self, *responses: Union[HttpResponse, Exception]) -> None:
        self._responses: List[Union[HttpResponse, Exception]] = list(responses)
        self.requests: List[SentRequest] = []

    def __call__(self, url: str, headers: Mapping[str, str], timeout_s: float) -> HttpResponse:
        self.requests.append(SentRequest(url=url, headers=dict(headers), timeout_s=timeout_s))
        if not self._responses:
            raise AssertionError("FakeTransport has no queued response")
        item = self._responses[0] if len(self._responses) == 1 else self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@dataclass
class StaticFetcher:
    response: Optional[HttpResponse] = None
    error: Optional[Exception] = None
    calls: int = field(default=0)

    def __call__(self) -> HttpResponse:
        self.calls += 1
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response
