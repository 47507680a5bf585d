"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  - Static defaults checked into the repo
#                            (polling intervals, retry budgets, cache TTLs)
#   2. .env file           - Local developer overrides (not committed)
#   3. Environment vars    - Set at deploy time
#
# Secrets never live in the YAML file; only tuning knobs do.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path
from typing import Any

import yaml

from toolbench.config.settings import Settings

# Used when config/config.yaml is absent or omits a section.
DEFAULTS: dict[str, Any] = {
    "replicate": {"poll_interval": 1.0, "max_attempts": 60},
    "seedream": {"poll_interval": 2.0, "max_attempts": 60},
    "bfl": {"poll_interval": 0.5, "max_attempts": 120},
    "runway": {"poll_interval": 2.0, "max_attempts": 120},
    "image_retry": {"max_retries": 3, "base_delay": 3.0},
    "cache": {"account_ttl": 3600, "voices_ttl": 300},
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to take overrides from; a fresh one is
            built when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config: dict[str, Any] = {}
    _deep_merge(config, DEFAULTS)

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
        },
        "vendors": settings.get_configured_vendors(),
        "auth": {
            "enabled": settings.auth_enabled,
            "allowed_email_domain": settings.allowed_email_domain,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        elif isinstance(value, dict):
            base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value
