# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry Configuration - Single source of truth.
YAML is king. Env vars ONLY for deploy-time overrides.

Example registry.yaml:

    storage:
      type: local            # or "my_package.storage:S3Storage"
      path: /var/lib/extension-registry
    admins:
      - github:registry-admin
    downloads:
      base_url: https://s3.amazonaws.com/extensions.example.org
    logging:
      level: INFO
      format: json
    paths:
      logs: /var/log/extension-registry
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Immutable registry configuration.
    All values from YAML. No hidden state.
    """

    # -- Storage --
    storage: str = "local"
    storage_path: str = "./registry-data"

    # -- Access --
    admins: List[str] = field(default_factory=list)

    # -- Downloads --
    download_base_url: str = ""

    # -- Logging --
    log_level: str = "INFO"
    log_format: str = "json"
    logs_path: str = ""


# =============================================================================
# LOADER
# =============================================================================

DEFAULT_CONFIG_PATH = "/etc/extension-registry/registry.yaml"


def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from YAML.
    Returns defaults if file doesn't exist.
    """
    if not Path(path).exists():
        return Config()

    with open(path) as f:
        y = yaml.safe_load(f) or {}

    # Helper to safely navigate nested dicts
    def get(d: dict, *keys, default=None):
        for k in keys:
            if not isinstance(d, dict):
                return default
            d = d.get(k, {})
        return d if d != {} else default

    storage = y.get("storage")
    if isinstance(storage, str):
        # Short form: "storage: local"
        storage_type = storage
        storage_path = "./registry-data"
    else:
        storage_type = get(y, "storage", "type", default="")
        storage_path = get(y, "storage", "path") or "./registry-data"

    return Config(
        storage=storage_type,
        storage_path=storage_path,
        admins=list(y.get("admins") or []),
        download_base_url=get(y, "downloads", "base_url") or "",
        log_level=os.getenv("LOG_LEVEL") or get(y, "logging", "level") or "INFO",
        log_format=get(y, "logging", "format") or "json",
        logs_path=get(y, "paths", "logs") or "",
    )


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        config_path = os.getenv("REGISTRY_CONFIG_PATH", DEFAULT_CONFIG_PATH)
        _config = load_config(config_path)
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    _config = None
    return get_config()
