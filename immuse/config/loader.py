"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
#   1. config/config.yaml  : static defaults checked into the repo
#   2. .env file           : local developer overrides (not committed)
#   3. Environment vars    : set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the values
# derived from Settings on top.  Generation parameters (temperature,
# max_tokens per operation) only live in YAML.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from immuse.config.settings import Settings
from immuse.utils.errors import ConfigurationError

# Used when config.yaml is missing or omits an operation.
DEFAULT_GENERATION: dict[str, dict[str, float | int]] = {
    "tour": {"temperature": 0.5, "max_tokens": 2000},
    "dynamic_chips": {"temperature": 0.7, "max_tokens": 1000},
    "preview": {"temperature": 0.8, "max_tokens": 1500},
    "story_intro": {"temperature": 0.8, "max_tokens": 1200},
    "tour_preview": {"temperature": 0.7, "max_tokens": 500},
}


def load_config(path: str | None = None, settings: Settings | None = None) -> dict[str, Any]:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML file.  Defaults to ``settings.config_path``.
        settings: Settings instance to read overrides from.  A fresh one is
                  built when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    settings = settings or Settings()
    config_path = Path(path or settings.config_path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(message=f"Malformed config file {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(message=f"Config file {config_path} must contain a mapping")
    else:
        yaml_config = {}

    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "openai": {
            "configured": bool(settings.openai_api_key),
            "text_model": settings.openai_text_model,
            "base_url": settings.openai_base_url or None,
        },
        "storage": {
            "database_path": settings.database_path,
            "upload_dir": settings.upload_dir,
            "max_upload_bytes": settings.max_upload_bytes,
        },
        "museum_directory": {
            "url": settings.museum_directory_url,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def generation_params(config: dict[str, Any], operation: str) -> dict[str, Any]:
    """Return ``{"temperature": ..., "max_tokens": ...}`` for *operation*.

    Values from ``config["generation"][operation]`` win over the built-in
    defaults key by key.
    """
    params = dict(DEFAULT_GENERATION.get(operation, {"temperature": 0.7, "max_tokens": 1000}))
    params.update((config.get("generation") or {}).get(operation) or {})
    return params


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
