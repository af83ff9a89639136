"""
Centralized configuration for clawsecrets.

All configuration is loaded from environment variables with sensible defaults.
Components never read this module directly; the CLI builds them from the
loaded config.

Usage:
    from clawsecrets.config import get_config
    cfg = get_config()
    print(cfg.secrets_dir)       # "/home/user/openclaw/secrets" or $CLAWSECRETS_SECRETS_DIR
    print(cfg.reload.service)    # "openclaw"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

ROTATION_DAYS = 90


@dataclass(frozen=True)
class ReloadConfig:
    """How to reach and restart the service that consumes the secrets."""

    service: str = "openclaw"
    compose_file: Path | None = None
    health_url: str = ""  # empty = rely on the container health status
    health_timeout: float = 30.0
    health_interval: float = 2.0

    @property
    def compose_args(self) -> list[str]:
        """Return the ``docker compose`` prefix including ``-f`` when configured."""
        args = ["docker", "compose"]
        if self.compose_file is not None:
            args += ["-f", str(self.compose_file)]
        return args


@dataclass(frozen=True)
class Config:
    """Top-level clawsecrets configuration."""

    home: Path = field(default_factory=lambda: Path.home() / "openclaw")
    secrets_dir: Path = field(default_factory=lambda: Path.home() / "openclaw" / "secrets")
    rotation_days: int = ROTATION_DAYS
    reload: ReloadConfig = field(default_factory=ReloadConfig)

    @property
    def backup_dir(self) -> Path:
        return self.secrets_dir / "backups"

    @property
    def metadata_file(self) -> Path:
        return self.secrets_dir / ".metadata.json"

    @property
    def lock_file(self) -> Path:
        return self.secrets_dir / ".rotation.lock"


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
    home = Path(os.environ.get("CLAWSECRETS_HOME", Path.home() / "openclaw"))
    secrets_dir = Path(os.environ.get("CLAWSECRETS_SECRETS_DIR", home / "secrets"))

    compose_file = os.environ.get("CLAWSECRETS_COMPOSE_FILE", "")
    reload_cfg = ReloadConfig(
        service=os.environ.get("CLAWSECRETS_SERVICE", "openclaw"),
        compose_file=Path(compose_file) if compose_file else None,
        health_url=os.environ.get("CLAWSECRETS_HEALTH_URL", ""),
        health_timeout=float(os.environ.get("CLAWSECRETS_HEALTH_TIMEOUT", "30")),
        health_interval=float(os.environ.get("CLAWSECRETS_HEALTH_INTERVAL", "2")),
    )

    return Config(
        home=home,
        secrets_dir=secrets_dir,
        rotation_days=int(os.environ.get("CLAWSECRETS_ROTATION_DAYS", str(ROTATION_DAYS))),
        reload=reload_cfg,
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
