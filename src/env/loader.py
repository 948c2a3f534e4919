from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .schema import EnvProfile, LoggingConfig, PathfinderConfig, RepositoriesConfig


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"

# Overrides the config directory without touching call sites.
CONFIG_ROOT_ENV_VAR = "PORTFOLIO_CONFIG_DIR"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _config_root(config_root: Optional[Path]) -> Path:
    if config_root is not None:
        return Path(config_root)
    override = os.getenv(CONFIG_ROOT_ENV_VAR)
    if override:
        return Path(override)
    return CONFIG_ROOT


def _load_yaml(root: Path, name: str) -> Dict[str, Any]:
    """Load a YAML config file from the config directory."""
    path = root / name
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _section(cfg: Dict[str, Any], key: str) -> Dict[str, Any]:
    raw = cfg.get(key) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"env.yaml '{key}' must be a mapping, got {type(raw)}")
    return raw


def _resolve_path(root: Path, value: Any) -> Optional[Path]:
    """Relative paths in env.yaml are relative to the project root."""
    if value in (None, ""):
        return None
    path = Path(str(value))
    if not path.is_absolute():
        path = root.parent / path
    return path


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_environment(config_root: Optional[Path] = None) -> EnvProfile:
    """Main entry point: returns a fully resolved EnvProfile."""
    root = _config_root(config_root)
    env_cfg = _load_yaml(root, "env.yaml")

    log_raw = _section(env_cfg, "logging")
    logging_cfg = LoggingConfig(
        level=str(log_raw.get("level", "INFO")).upper(),
        events_log=_resolve_path(root, log_raw.get("events_log")),
    )

    pf_raw = _section(env_cfg, "pathfinder")
    pathfinder_cfg = PathfinderConfig(max_expansions=pf_raw.get("max_expansions"))

    repo_raw = _section(env_cfg, "repositories")
    repositories_cfg: Optional[RepositoriesConfig] = None
    if repo_raw:
        if not repo_raw.get("username"):
            raise ValueError("env.yaml 'repositories' section must define 'username'.")
        defaults = RepositoriesConfig(username=repo_raw["username"])
        repositories_cfg = RepositoriesConfig(
            username=str(repo_raw["username"]),
            api_url=str(repo_raw.get("api_url", defaults.api_url)).rstrip("/"),
            sort=str(repo_raw.get("sort", defaults.sort)),
            limit=int(repo_raw.get("limit", defaults.limit)),
            storage_key=str(repo_raw.get("storage_key", defaults.storage_key)),
            session_path=_resolve_path(root, repo_raw.get("session_path"))
            or _resolve_path(root, defaults.session_path),
            timeout_s=float(repo_raw.get("timeout_s", defaults.timeout_s)),
            token_env_var=str(repo_raw.get("token_env_var", defaults.token_env_var)),
        )

    profile = EnvProfile(
        name=str(env_cfg.get("profile", "default")),
        logging=logging_cfg,
        pathfinder=pathfinder_cfg,
        repositories=repositories_cfg,
    )

    validate_env(profile)
    return profile


def validate_env(env: EnvProfile) -> None:
    """
    Minimal sanity checks for the environment.

    Run again by callers that override fields after loading.
    """
    if env.logging.level not in LOG_LEVELS:
        raise ValueError(
            f"Invalid logging.level {env.logging.level!r}; expected one of {LOG_LEVELS}"
        )

    budget = env.pathfinder.max_expansions
    if budget is not None and (not isinstance(budget, int) or budget <= 0):
        raise ValueError(f"pathfinder.max_expansions must be a positive integer, got {budget!r}")

    repos = env.repositories
    if repos is not None:
        if repos.limit <= 0:
            raise ValueError(f"repositories.limit must be positive, got {repos.limit}")
        if repos.timeout_s <= 0:
            raise ValueError(f"repositories.timeout_s must be positive, got {repos.timeout_s}")
        if not repos.storage_key:
            raise ValueError("repositories.storage_key must not be empty")


def log_level(env: EnvProfile) -> int:
    """Numeric logging level for env.logging.level; unknown names fall back to INFO."""
    return getattr(logging, env.logging.level, logging.INFO)
