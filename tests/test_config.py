"""Tests for clawsecrets.config — centralized configuration."""

from pathlib import Path

import pytest

from clawsecrets.config import Config, ReloadConfig, get_config, reset_config


@pytest.fixture(autouse=True)
def clean_config():
    """Reset config singleton between tests."""
    reset_config()
    yield
    reset_config()


class TestReloadConfig:
    def test_defaults(self):
        r = ReloadConfig()
        assert r.service == "openclaw"
        assert r.compose_file is None
        assert r.health_url == ""
        assert r.health_timeout == 30.0

    def test_compose_args(self):
        assert ReloadConfig().compose_args == ["docker", "compose"]
        r = ReloadConfig(compose_file=Path("/srv/dc.yml"))
        assert r.compose_args == ["docker", "compose", "-f", "/srv/dc.yml"]

    def test_frozen(self):
        r = ReloadConfig()
        with pytest.raises(AttributeError):
            r.service = "other"  # type: ignore[misc]


class TestConfig:
    def test_derived_paths(self, tmp_path):
        cfg = Config(home=tmp_path, secrets_dir=tmp_path / "secrets")
        assert cfg.backup_dir == tmp_path / "secrets" / "backups"
        assert cfg.metadata_file == tmp_path / "secrets" / ".metadata.json"
        assert cfg.lock_file == tmp_path / "secrets" / ".rotation.lock"
        assert cfg.rotation_days == 90


class TestGetConfig:
    def test_defaults(self):
        cfg = get_config()
        assert cfg.home == Path.home() / "openclaw"
        assert cfg.secrets_dir == Path.home() / "openclaw" / "secrets"
        assert cfg.reload.service == "openclaw"

    def test_singleton(self):
        assert get_config() is get_config()

    def test_reset(self):
        c1 = get_config()
        reset_config()
        assert c1 is not get_config()

    def test_home_moves_secrets_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CLAWSECRETS_HOME", str(tmp_path))
        assert get_config().secrets_dir == tmp_path / "secrets"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CLAWSECRETS_SECRETS_DIR", str(tmp_path / "vault"))
        monkeypatch.setenv("CLAWSECRETS_ROTATION_DAYS", "30")
        monkeypatch.setenv("CLAWSECRETS_SERVICE", "gateway")
        monkeypatch.setenv("CLAWSECRETS_COMPOSE_FILE", "/srv/openclaw/compose.yml")
        monkeypatch.setenv("CLAWSECRETS_HEALTH_URL", "http://127.0.0.1:18789/health")
        monkeypatch.setenv("CLAWSECRETS_HEALTH_TIMEOUT", "45")
        cfg = get_config()
        assert cfg.secrets_dir == tmp_path / "vault"
        assert cfg.rotation_days == 30
        assert cfg.reload.service == "gateway"
        assert cfg.reload.compose_file == Path("/srv/openclaw/compose.yml")
        assert cfg.reload.health_url.endswith("/health")
        assert cfg.reload.health_timeout == 45.0
