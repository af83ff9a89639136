"""
Rotation orchestrator — replaces credential values one at a time.

Per credential, strictly sequential:

    precondition (ledger exists)
    → backup live file
    → prompt until the value validates
    → stage new value (temp file, invisible)
    → ledger.update_credential (atomic rewrite)
    → rename staged file over the live file
    → (once per run) reload the consuming service

The ledger is written before the swap. If the ledger write fails, the staged
file is dropped and nothing changed; if the swap fails, the previous ledger
document is written back. The live secret and its ledger entry therefore never
disagree about whether a rotation happened.

"Rotate all" aborts on the first failure: credentials already rotated in that
run stay rotated (each with its own backup and ledger entry), the global
rotate_by is not advanced and no reload is triggered.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from clawsecrets.credentials import CREDENTIALS, Credential, get_credential
from clawsecrets.errors import (
    MetadataWriteFailed,
    NoExistingSecret,
    NotFound,
    RotationAborted,
    RotationFailed,
    SecretsError,
)
from clawsecrets.ledger import MetadataLedger, expires_at, format_timestamp
from clawsecrets.lock import RotationLock
from clawsecrets.models import LedgerDocument
from clawsecrets.prompt import SecretPrompt
from clawsecrets.reload import ReloadResult, ReloadTrigger, reload_service
from clawsecrets.store import SecretStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class RotatedSecret:
    name: str
    backup_path: Path
    created: str
    expires: str


@dataclass
class RotationSummary:
    rotated: list[RotatedSecret] = field(default_factory=list)
    rotate_by: str | None = None
    reload: ReloadResult | None = None

    @property
    def names(self) -> list[str]:
        return [r.name for r in self.rotated]


class RotationOrchestrator:
    """Drives backup → input → validate → ledger → atomic swap → reload."""

    def __init__(
        self,
        store: SecretStore,
        ledger: MetadataLedger,
        prompt: SecretPrompt,
        reload_trigger: ReloadTrigger,
        *,
        service: str = "openclaw",
        health_timeout: float = 30.0,
        lock_path: Path | None = None,
        clock: Callable[[], datetime] = _utcnow,
        report: Callable[[str], None] = print,
    ):
        self.store = store
        self.ledger = ledger
        self.prompt = prompt
        self.reload_trigger = reload_trigger
        self.service = service
        self.health_timeout = health_timeout
        self.lock_path = lock_path
        self._clock = clock
        self._report = report

    # ─── Public API ─────────────────────────────────────────────────────

    def rotate_one(self, name: str) -> RotationSummary:
        """Rotate a single named credential. Raises UnknownCredential first."""
        credential = get_credential(name)
        return self._run([credential], advance_global=False)

    def rotate_all(self) -> RotationSummary:
        """Rotate every credential in catalogue order, then advance rotate_by."""
        return self._run(CREDENTIALS, advance_global=True)

    # ─── Internals ──────────────────────────────────────────────────────

    def _lock(self):
        if self.lock_path is None:
            return contextlib.nullcontext()
        return RotationLock(self.lock_path)

    def _run(self, credentials: Iterable[Credential], *, advance_global: bool) -> RotationSummary:
        summary = RotationSummary()
        with self._lock():
            # Refuse to do anything before init: raises Uninitialized
            self.ledger.load()

            for credential in credentials:
                try:
                    summary.rotated.append(self._rotate_credential(credential))
                except (RotationFailed, RotationAborted) as e:
                    e.summary = summary
                    raise
                self._report("")

            if advance_global:
                now = self._clock()
                rotate_by = expires_at(now, self.ledger.rotation_days)
                try:
                    self.ledger.update_global(now, rotate_by)
                except SecretsError as e:
                    raise RotationFailed("all", "metadata", e, summary) from e
                summary.rotate_by = format_timestamp(rotate_by)

            self._report(f"[STEP] Reloading {self.service} to use new secrets...")
            summary.reload = reload_service(self.reload_trigger, self.service, self.health_timeout)
            if summary.reload.ok:
                self._report("[INFO] Service restarted successfully")
            else:
                self._report(f"[WARN] {summary.reload.warning}")

        logger.info("Rotation run complete: %s", ", ".join(summary.names))
        return summary

    def _rotate_credential(self, credential: Credential) -> RotatedSecret:
        name = credential.name
        self._report(f"[STEP] Rotating: {name}")
        self._report(f"Service: {credential.service}")
        self._report(f"Get from: {credential.url}")
        self._report(f"Format: {credential.format}")

        step = "precondition"
        try:
            previous = self.ledger.load()

            step = "backup"
            try:
                backup_path = self.store.backup(name)
            except NotFound as e:
                raise NoExistingSecret(name, e.path) from e
            self._report(f"[INFO] Backed up {name} to {backup_path}")

            step = "input"
            value = self.prompt.ask_secret(credential, f"Enter new {credential.label}")

            step = "write"
            staged = self.store.stage(name, value)
            ledger_written = False
            try:
                step = "metadata"
                now = self._clock()
                expires = expires_at(now, self.ledger.rotation_days)
                self.ledger.update_credential(
                    name, now, expires, format=credential.format, service=credential.service
                )
                ledger_written = True

                step = "write"
                staged.commit()
            except BaseException:
                staged.discard()
                if ledger_written:
                    self._restore_ledger(previous)
                raise
        except (KeyboardInterrupt, EOFError):
            logger.warning("Rotation of %s interrupted at step '%s'", name, step)
            raise RotationAborted(name) from None
        except SecretsError as e:
            logger.error("Rotation of %s failed at step '%s': %s", name, step, e)
            raise RotationFailed(name, step, e) from e

        self._report(f"[INFO] {name} rotated successfully")
        return RotatedSecret(
            name=name,
            backup_path=backup_path,
            created=format_timestamp(now),
            expires=format_timestamp(expires),
        )

    def _restore_ledger(self, previous: LedgerDocument) -> None:
        try:
            self.ledger.save(previous)
            logger.info("Restored previous metadata ledger after failed swap")
        except MetadataWriteFailed as e:
            logger.error("Could not restore metadata ledger: %s", e)
