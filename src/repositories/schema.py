# repository summary records
# src/repositories/schema.py
"""
RepositorySummary: the subset of a GitHub repository listing the
portfolio displays, plus parsing of the `{"repositories": [...]}` envelope.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional


class RepositoryFetchError(Exception):
    """Raised when a repository listing cannot be fetched or parsed."""


@dataclass(frozen=True)
class RepositorySummary:
    name: str
    full_name: str
    html_url: str
    description: Optional[str] = None
    language: Optional[str] = None
    stargazers_count: int = 0
    forks_count: int = 0
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "RepositorySummary":
        """
        Build from one entry of a GitHub `/users/{user}/repos` response.

        Unknown keys are ignored; `name` is required.
        """
        if not isinstance(raw, Mapping):
            raise RepositoryFetchError(f"Repository entry must be an object, got {type(raw).__name__}")
        name = raw.get("name")
        if not name:
            raise RepositoryFetchError(f"Repository entry without a name: {raw!r}")
        try:
            return cls(
                name=str(name),
                full_name=str(raw.get("full_name") or name),
                html_url=str(raw.get("html_url") or ""),
                description=raw.get("description"),
                language=raw.get("language"),
                stargazers_count=int(raw.get("stargazers_count") or 0),
                forks_count=int(raw.get("forks_count") or 0),
                updated_at=raw.get("updated_at"),
            )
        except (TypeError, ValueError) as exc:
            raise RepositoryFetchError(f"Bad repository entry {name!r}: {exc}") from exc

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_envelope(body: bytes) -> List[RepositorySummary]:
    """
    Decode a `{"success": true, "repositories": [...]}` response body.

    Empty body, malformed JSON, or a missing/non-list `repositories` key
    raise RepositoryFetchError.
    """
    if not body or not body.strip():
        raise RepositoryFetchError("Empty response body")
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise RepositoryFetchError(f"Malformed JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise RepositoryFetchError(f"Expected a JSON object, got {type(data).__name__}")
    if data.get("success") is False:
        raise RepositoryFetchError("Endpoint reported success=false")
    items = data.get("repositories")
    if not isinstance(items, list):
        raise RepositoryFetchError("Response has no 'repositories' list")

    return [RepositorySummary.from_api(item) for item in items]


def summaries_from_cache(raw: str) -> List[RepositorySummary]:
    """Decode the JSON list stored in session storage."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RepositoryFetchError(f"Malformed cached JSON: {exc}") from exc
    if not isinstance(data, list):
        raise RepositoryFetchError("Cached repositories must be a JSON list")
    return [RepositorySummary.from_api(item) for item in data]


def summaries_to_cache(repos: List[RepositorySummary]) -> str:
    return json.dumps([r.to_dict() for r in repos], ensure_ascii=False)
