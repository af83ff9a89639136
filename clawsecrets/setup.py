"""
clawsecrets init — first-time population of every credential and the ledger.

Steps:
    1. Refuse to overwrite existing secrets unless confirmed (or --force)
    2. Collect all five values (masked, validated)
    3. Back up any values being overwritten
    4. Write each secret atomically (0600, directory 0700)
    5. Write .gitignore, the metadata ledger and the .initialized marker

Values are collected before anything is written, so an interrupted init leaves
the secrets directory exactly as it was.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from clawsecrets.credentials import CREDENTIALS, Credential
from clawsecrets.ledger import MetadataLedger
from clawsecrets.lock import RotationLock
from clawsecrets.prompt import SecretPrompt
from clawsecrets.store import SecretStore

logger = logging.getLogger(__name__)


@dataclass
class InitResult:
    performed: bool
    written: list[str] = field(default_factory=list)
    backups: list[Path] = field(default_factory=list)
    created_at: str = ""
    rotate_by: str = ""


def has_existing_secrets(store: SecretStore, ledger: MetadataLedger) -> bool:
    return ledger.exists() or any(store.exists(c.name) for c in CREDENTIALS)


def run_init(
    store: SecretStore,
    ledger: MetadataLedger,
    prompt: SecretPrompt,
    *,
    force: bool = False,
    credentials: Iterable[Credential] = CREDENTIALS,
    lock_path: Path | None = None,
    clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    report: Callable[[str], None] = print,
) -> InitResult:
    """Interactively initialize every credential. Returns what was done."""
    credentials = list(credentials)
    lock = RotationLock(lock_path) if lock_path else contextlib.nullcontext()

    with lock:
        if has_existing_secrets(store, ledger) and not force:
            report(f"[WARN] Secrets already exist in {store.secrets_dir}")
            if not prompt.confirm(
                "Do you want to reinitialize? This will overwrite existing secrets."
            ):
                report("[INFO] Aborted. Use 'clawsecrets rotate' to update existing secrets.")
                return InitResult(performed=False)

        report("Security notes:")
        report("  - Your input will be hidden")
        report(f"  - Secrets are stored in: {store.secrets_dir}")
        report("  - Directory permissions: 700 (owner only)")
        report(f"  - Secrets will expire in {ledger.rotation_days} days")
        report("  - Never commit secrets to version control")
        report("")

        values: dict[str, str] = {}
        total = len(credentials)
        for i, credential in enumerate(credentials, 1):
            report(f"[STEP] {i}/{total}: {credential.label} ({credential.service})")
            report(f"Get it from: {credential.url}")
            report(f"Format: {credential.format}")
            values[credential.name] = prompt.ask_secret(credential)
            report("")

        result = InitResult(performed=True)
        for credential in credentials:
            if store.exists(credential.name):
                result.backups.append(store.backup(credential.name))
            store.write(credential.name, values[credential.name])
            result.written.append(credential.name)
            report(f"[INFO] {credential.label} saved")

        store.write_gitignore()
        doc = ledger.create(credentials, clock())
        store.mark_initialized()

        result.created_at = doc.created_at
        result.rotate_by = doc.rotate_by
        logger.info("Initialized %d secrets in %s", len(result.written), store.secrets_dir)
        return result
