"""
Reload trigger — makes the consuming service pick up rotated secrets.

The orchestrator only needs the ReloadTrigger protocol. ComposeReloadTrigger
drives ``docker compose``; health comes from an HTTP endpoint when one is
configured, else from the container's own health status.
"""

from __future__ import annotations

import json
import logging
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import httpx

from clawsecrets.config import ReloadConfig
from clawsecrets.errors import ReloadTimeout

logger = logging.getLogger(__name__)


@dataclass
class HealthStatus:
    healthy: bool
    detail: str = ""
    elapsed: float = 0.0


@dataclass
class ReloadResult:
    service: str
    restarted: bool = False
    healthy: bool = False
    warning: str = ""

    @property
    def ok(self) -> bool:
        return self.restarted and self.healthy


class ReloadTrigger(Protocol):
    def is_running(self, service: str) -> bool: ...

    def restart_graceful(self, service: str) -> bool: ...

    def wait_healthy(self, service: str, timeout: float) -> HealthStatus: ...


class NullReloadTrigger:
    """Used with --no-reload: reports the service as not running."""

    def is_running(self, service: str) -> bool:
        return False

    def restart_graceful(self, service: str) -> bool:
        return False

    def wait_healthy(self, service: str, timeout: float) -> HealthStatus:
        return HealthStatus(healthy=False, detail="reload disabled")


class ComposeReloadTrigger:
    """Recreate a docker compose service and poll its health."""

    def __init__(
        self,
        config: ReloadConfig | None = None,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or ReloadConfig()
        self._run = run
        self._sleep = sleep
        self._clock = clock

    def _compose(self, *args: str, timeout: float = 120) -> subprocess.CompletedProcess:
        cmd = self.config.compose_args + list(args)
        logger.debug("Running: %s", " ".join(cmd))
        return self._run(cmd, capture_output=True, text=True, timeout=timeout)

    def _containers(self, service: str) -> list[dict]:
        """Return ``docker compose ps`` entries for a service."""
        try:
            proc = self._compose("ps", "--format", "json", service, timeout=30)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("docker compose ps failed: %s", e)
            return []
        if proc.returncode != 0:
            logger.warning("docker compose ps exited %d: %s", proc.returncode, proc.stderr.strip())
            return []
        return _parse_ps(proc.stdout)

    def is_running(self, service: str) -> bool:
        return any(c.get("State") == "running" for c in self._containers(service))

    def restart_graceful(self, service: str) -> bool:
        """Recreate only this service; dependents keep running."""
        try:
            proc = self._compose("up", "-d", "--force-recreate", "--no-deps", service)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("docker compose up failed: %s", e)
            return False
        if proc.returncode != 0:
            logger.warning("Recreate of %s exited %d: %s", service, proc.returncode, proc.stderr.strip())
            return False
        return True

    def _probe(self, service: str) -> HealthStatus:
        if self.config.health_url:
            try:
                resp = httpx.get(self.config.health_url, timeout=5)
                return HealthStatus(resp.status_code == 200, f"HTTP {resp.status_code}")
            except Exception as e:
                return HealthStatus(False, str(e))

        containers = self._containers(service)
        if not containers:
            return HealthStatus(False, "no container")
        for c in containers:
            if c.get("State") != "running":
                return HealthStatus(False, c.get("State", "unknown"))
            health = c.get("Health", "")
            # No healthcheck defined: running is the best signal available
            if health and health != "healthy":
                return HealthStatus(False, health)
        return HealthStatus(True, "healthy")

    def wait_healthy(self, service: str, timeout: float) -> HealthStatus:
        start = self._clock()
        while True:
            status = self._probe(service)
            status.elapsed = self._clock() - start
            if status.healthy or status.elapsed >= timeout:
                return status
            self._sleep(self.config.health_interval)


def _parse_ps(output: str) -> list[dict]:
    """Parse ``docker compose ps --format json`` (array or one object per line)."""
    output = output.strip()
    if not output:
        return []
    try:
        data = json.loads(output)
        return data if isinstance(data, list) else [data]
    except json.JSONDecodeError:
        pass
    entries = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError:
            logger.debug("Skipping unparseable ps line: %s", line)
    return entries


def reload_service(trigger: ReloadTrigger, service: str, timeout: float) -> ReloadResult:
    """Restart ``service`` and wait for it to come back.

    Every failure here is a warning: the secrets are already durable.
    """
    result = ReloadResult(service=service)
    if not trigger.is_running(service):
        result.warning = f"{service} not running. Start with: docker compose up -d"
        logger.warning(result.warning)
        return result

    logger.info("Performing rolling restart of %s", service)
    if not trigger.restart_graceful(service):
        result.warning = f"Restart of {service} failed. Check: docker compose ps"
        logger.warning(result.warning)
        return result
    result.restarted = True

    status = trigger.wait_healthy(service, timeout)
    result.healthy = status.healthy
    if not status.healthy:
        err = ReloadTimeout(
            f"{service} restarted but not healthy after {timeout:.0f}s ({status.detail})"
        )
        result.warning = str(err)
        logger.warning("%s", err)
    else:
        logger.info("%s healthy after %.1fs", service, status.elapsed)
    return result
