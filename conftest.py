"""
Root-level shared test fixtures.

Inherited by every suite under tests/.
"""

from __future__ import annotations

import pytest

from clawsecrets.config import reset_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove CLAWSECRETS_* env vars that leak between tests and reset the config singleton."""
    for key in [
        "CLAWSECRETS_HOME",
        "CLAWSECRETS_SECRETS_DIR",
        "CLAWSECRETS_ROTATION_DAYS",
        "CLAWSECRETS_SERVICE",
        "CLAWSECRETS_COMPOSE_FILE",
        "CLAWSECRETS_HEALTH_URL",
        "CLAWSECRETS_HEALTH_TIMEOUT",
        "CLAWSECRETS_HEALTH_INTERVAL",
    ]:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()
