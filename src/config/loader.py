"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
#   1. config/config.yaml  -- pipeline tunables checked into the repo
#   2. .env file           -- local secrets (not committed)
#   3. Environment vars    -- deploy-time values
#
# load_config() reads the YAML first, then deep-merges the Settings-derived
# values on top, so env always wins where keys overlap.  Missing YAML keys
# fall back to DEFAULT_CONFIG, which keeps tests and fresh checkouts working
# without the file.
# ──────────────────────────────────────────────────────────────────────
"""

import copy
from pathlib import Path
from typing import Any

import yaml

from src.config.settings import Settings

DEFAULT_CONFIG: dict[str, Any] = {
    "app": {"name": "eventsearch", "version": "0.1.0"},
    "retriever": {
        "max_retries": 3,
        "backoff_base": 2.0,
        "timeout_seconds": 20.0,
        "max_limit": 200,
        "overfetch_factor": 2,
    },
    "fallback": {"timeout_seconds": 30.0},
    "cache": {
        "ttl_seconds": 300,
        "max_entries": 500,
        "detail_max_entries": 2000,
        "sweep_interval_seconds": 60,
    },
    "search": {"coalesce_requests": True},
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Pre-built Settings; a fresh instance is read from the
            environment when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
            "cors_origins": settings.get_cors_origins(),
        },
        "rapidapi": {
            "api_key": settings.rapidapi_key,
            "host": settings.rapidapi_host,
            "base_url": settings.rapidapi_base_url,
        },
        "fallback": {
            "url": settings.fallback_search_url,
            "api_key": settings.fallback_api_key,
        },
        "logging": {
            "level": settings.log_level,
        },
        "available_providers": settings.get_available_providers(),
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
