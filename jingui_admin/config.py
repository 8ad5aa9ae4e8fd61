"""
Centralized configuration for Jingui Admin.

All configuration is loaded from environment variables with sensible defaults.
The server endpoint and bearer token are NOT configuration: they live in the
credential store (see jingui_admin.settings) so they can change at runtime.

Usage:
    from jingui_admin.config import get_config
    cfg = get_config()
    print(cfg.settings_path)      # ~/.config/jingui/settings.json
    print(cfg.notification_ttl)   # 3.0
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_settings_path() -> Path:
    return Path.home() / ".config" / "jingui" / "settings.json"


@dataclass(frozen=True)
class Config:
    """Top-level Jingui Admin configuration."""

    settings_path: Path = field(default_factory=_default_settings_path)
    http_timeout: float = 30.0
    notification_ttl: float = 3.0
    log_level: str = "WARNING"


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    settings_path = Path(os.environ.get("JINGUI_SETTINGS_PATH", _default_settings_path()))

    return Config(
        settings_path=settings_path.expanduser(),
        http_timeout=float(os.environ.get("JINGUI_HTTP_TIMEOUT", "30.0")),
        notification_ttl=float(os.environ.get("JINGUI_NOTIFICATION_TTL", "3.0")),
        log_level=os.environ.get("JINGUI_LOG_LEVEL", "WARNING").upper(),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
