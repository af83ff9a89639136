"""
Metadata ledger — JSON record of creation/expiry timestamps for every credential.

Shape of secrets/.metadata.json:
    {
      "created_at": "2026-01-01T00:00:00Z",
      "rotate_by": "2026-04-01T00:00:00Z",
      "rotation_days": 90,
      "secrets": {
        "anthropic_api_key": {"created": ..., "expires": ..., "format": "sk-ant-*", "service": "Anthropic Claude"},
        ...
      }
    }

Every change is read → modify → atomic rewrite of the whole document.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from pydantic import ValidationError

from clawsecrets.config import ROTATION_DAYS
from clawsecrets.credentials import Credential
from clawsecrets.errors import LedgerCorrupt, MetadataWriteFailed, Uninitialized
from clawsecrets.models import TIMESTAMP_FORMAT, LedgerDocument, SecretEntry
from clawsecrets.store import FILE_MODE

logger = logging.getLogger(__name__)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601, UTC, second precision, trailing Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse a ledger timestamp into an aware UTC datetime."""
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=UTC)


def expires_at(created: datetime, rotation_days: int = ROTATION_DAYS) -> datetime:
    return created + timedelta(days=rotation_days)


class MetadataLedger:
    """Reads and atomically rewrites the metadata document."""

    def __init__(self, path: Path | str, rotation_days: int = ROTATION_DAYS):
        self.path = Path(path)
        self.rotation_days = rotation_days

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> LedgerDocument:
        """Parse the ledger. Raises Uninitialized if it does not exist."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise Uninitialized(self.path) from None
        try:
            return LedgerDocument.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise LedgerCorrupt(f"Cannot parse metadata ledger {self.path}: {e}") from e

    def save(self, doc: LedgerDocument) -> None:
        """Atomically rewrite the whole document (temp file + rename, mode 600)."""
        content = json.dumps(doc.model_dump(), indent=2) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=".metadata-",
                suffix=".tmp",
            )
        except OSError as e:
            raise MetadataWriteFailed(f"Cannot create temp file for {self.path}: {e}") from e
        try:
            os.fchmod(fd, FILE_MODE)
            os.write(fd, content.encode("utf-8"))
            os.fsync(fd)
            os.close(fd)
            os.replace(tmp, self.path)
        except OSError as e:
            try:
                os.close(fd)
            except OSError:
                pass
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise MetadataWriteFailed(f"Failed to write metadata ledger {self.path}: {e}") from e

    def create(self, credentials: Iterable[Credential], now: datetime) -> LedgerDocument:
        """Write a fresh ledger with every credential created at ``now``."""
        created = format_timestamp(now)
        rotate_by = format_timestamp(expires_at(now, self.rotation_days))
        doc = LedgerDocument(
            created_at=created,
            rotate_by=rotate_by,
            rotation_days=self.rotation_days,
            secrets={
                c.name: SecretEntry(
                    created=created, expires=rotate_by, format=c.format, service=c.service
                )
                for c in credentials
            },
        )
        self.save(doc)
        logger.info("Created metadata ledger at %s (rotate by %s)", self.path, rotate_by)
        return doc

    def update_credential(
        self,
        name: str,
        created_at: datetime,
        expires: datetime,
        *,
        format: str = "",
        service: str = "",
    ) -> LedgerDocument:
        """Merge one credential's timestamps, keeping every other entry as-is.

        ``format``/``service`` only fill in an entry that does not exist yet.
        """
        doc = self.load()
        created = format_timestamp(created_at)
        expiry = format_timestamp(expires)
        entry = doc.secrets.get(name)
        if entry is None:
            entry = SecretEntry(created=created, expires=expiry, format=format, service=service)
            doc.secrets[name] = entry
        entry.created = created
        entry.expires = expiry
        self.save(doc)
        logger.info("Ledger: %s created=%s expires=%s", name, entry.created, entry.expires)
        return doc

    def update_global(self, created_at: datetime, rotate_by: datetime) -> LedgerDocument:
        doc = self.load()
        doc.created_at = format_timestamp(created_at)
        doc.rotate_by = format_timestamp(rotate_by)
        self.save(doc)
        logger.info("Ledger: global rotate_by=%s", doc.rotate_by)
        return doc
