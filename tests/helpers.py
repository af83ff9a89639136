"""Test doubles and credential fixtures shared across the suite."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from clawsecrets.prompt import SecretPrompt
from clawsecrets.reload import HealthStatus

VALID = {
    "anthropic_api_key": "sk-ant-" + "a" * 95,
    "openai_api_key": "sk-" + "A1" * 16,
    "google_api_key": "AIza" + "x" * 35,
    "moonshot_api_key": "sk-" + "m" * 40,
    "telegram_bot_token": "123456789:" + "T" * 35,
}

NEW_VALID = {
    "anthropic_api_key": "sk-ant-" + "b" * 100,
    "openai_api_key": "sk-proj-" + "new_key-" * 5,
    "google_api_key": "AIza" + "y" * 35,
    "moonshot_api_key": "sk-" + "n" * 48,
    "telegram_bot_token": "987654321:" + "U" * 35,
}


class FakeClock:
    """Deterministic UTC clock that advances one second per call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class FakeReloadTrigger:
    def __init__(self, running: bool = True, restart_ok: bool = True, healthy: bool = True):
        self.running = running
        self.restart_ok = restart_ok
        self.healthy = healthy
        self.calls: list[tuple[str, str]] = []

    def is_running(self, service: str) -> bool:
        self.calls.append(("is_running", service))
        return self.running

    def restart_graceful(self, service: str) -> bool:
        self.calls.append(("restart", service))
        return self.restart_ok

    def wait_healthy(self, service: str, timeout: float) -> HealthStatus:
        self.calls.append(("wait_healthy", service))
        return HealthStatus(healthy=self.healthy, detail="healthy" if self.healthy else "starting")


def scripted_prompt(secrets: Iterable[str], lines: Iterable[str] = ()) -> SecretPrompt:
    """A SecretPrompt fed from lists instead of the terminal.

    Items that are exception instances are raised instead of returned.
    """
    secret_iter = iter(secrets)
    line_iter = iter(lines)
    echoed: list[str] = []

    def _next(it):
        item = next(it)
        if isinstance(item, BaseException):
            raise item
        return item

    prompt = SecretPrompt(
        read_secret=lambda _p: _next(secret_iter),
        read_line=lambda _p: _next(line_iter),
        echo=echoed.append,
    )
    prompt.echoed = echoed  # type: ignore[attr-defined]
    return prompt
