"""
Secret store — one owner-only file per credential under the secrets directory.

Layout:
    secrets/<name>.txt                              (0600, raw value)
    secrets/backups/<name>_<YYYYMMDD_HHMMSS>.txt.bak  (0600)
    secrets/.initialized                            (init marker)

Writes are staged to a temp file in the same directory and renamed over the
live file, so readers see either the old or the new value, never a partial one.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import stat
import tempfile
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from clawsecrets.errors import NotFound, WriteFailed

logger = logging.getLogger(__name__)

DIR_MODE = stat.S_IRWXU  # 700
FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 600

INITIALIZED_MARKER = ".initialized"

# <name>_<YYYYMMDD_HHMMSS>[_<n>].txt.bak
_BACKUP_NAME = re.compile(r"^(?P<name>.+)_(?P<stamp>\d{8}_\d{6})(?:_(?P<n>\d+))?\.txt\.bak$")

GITIGNORE = """\
# Ignore all secret files
*.txt
*.key
*.pem
*.bak

# Allow metadata (no sensitive data)
!.metadata.json

# Allow this .gitignore
!.gitignore
"""


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StagedSecret:
    """A new value written to a temp file, not yet visible under the live name."""

    def __init__(self, name: str, tmp_path: Path, live_path: Path):
        self.name = name
        self.tmp_path = tmp_path
        self.live_path = live_path
        self.done = False

    def commit(self) -> Path:
        """Atomically rename the staged file over the live file."""
        if self.done:
            raise WriteFailed(f"Staged write for {self.name} already finished")
        try:
            os.replace(self.tmp_path, self.live_path)
        except OSError as e:
            self.discard()
            raise WriteFailed(f"Failed to replace {self.live_path}: {e}") from e
        self.done = True
        logger.info("Replaced secret %s", self.name)
        return self.live_path

    def discard(self) -> None:
        """Remove the temp file. The live file is untouched."""
        if self.done:
            return
        self.done = True
        try:
            self.tmp_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove staged file %s: %s", self.tmp_path, e)


class SecretStore:
    """On-disk keyed collection of credential values."""

    def __init__(
        self,
        secrets_dir: Path | str,
        clock: Callable[[], datetime] = _utcnow,
        create: bool = True,
    ):
        """``create=False`` leaves the directory alone until something is written."""
        self.secrets_dir = Path(secrets_dir)
        self.backup_dir = self.secrets_dir / "backups"
        self._clock = clock
        if create:
            self.ensure_dir()

    # ─── Paths ──────────────────────────────────────────────────────────

    def path_for(self, name: str) -> Path:
        return self.secrets_dir / f"{name}.txt"

    def ensure_dir(self) -> None:
        """Create the secrets directory if needed and force mode 700."""
        self.secrets_dir.mkdir(parents=True, exist_ok=True)
        self.secrets_dir.chmod(DIR_MODE)

    # ─── Read / write ───────────────────────────────────────────────────

    def exists(self, name: str) -> bool:
        path = self.path_for(name)
        return path.is_file() and path.stat().st_size > 0

    def read(self, name: str) -> str:
        """Return the current value. Raises NotFound."""
        path = self.path_for(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFound(name, path) from None
        # Files written by the old shell scripts end with a newline
        if raw.endswith("\n"):
            raw = raw[:-1]
        return raw

    def stage(self, name: str, value: str) -> StagedSecret:
        """Write ``value`` to a 0600 temp file next to the live file."""
        self.ensure_dir()
        live = self.path_for(name)
        try:
            fd, tmp = tempfile.mkstemp(dir=self.secrets_dir, prefix=f".{name}.", suffix=".tmp")
        except OSError as e:
            raise WriteFailed(f"Cannot create temp file for {name}: {e}") from e
        try:
            os.fchmod(fd, FILE_MODE)
            os.write(fd, value.encode("utf-8"))
            os.fsync(fd)
            os.close(fd)
        except OSError as e:
            try:
                os.close(fd)
            except OSError:
                pass
            Path(tmp).unlink(missing_ok=True)
            raise WriteFailed(f"Failed to write temp file for {name}: {e}") from e
        return StagedSecret(name, Path(tmp), live)

    def write(self, name: str, value: str) -> Path:
        """Atomically replace the live value for ``name``."""
        return self.stage(name, value).commit()

    # ─── Backups ────────────────────────────────────────────────────────

    def backup(self, name: str) -> Path:
        """Copy the live file to a uniquely named backup. Raises NotFound."""
        self.ensure_dir()
        live = self.path_for(name)
        if not live.is_file():
            raise NotFound(name, live)

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir.chmod(DIR_MODE)

        stamp = self._clock().astimezone(UTC).strftime("%Y%m%d_%H%M%S")
        target = self.backup_dir / f"{name}_{stamp}.txt.bak"
        n = 1
        while target.exists():
            target = self.backup_dir / f"{name}_{stamp}_{n}.txt.bak"
            n += 1

        try:
            # O_EXCL: never clobber an existing backup
            fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_EXCL, FILE_MODE)
            with os.fdopen(fd, "wb") as dst, open(live, "rb") as src:
                shutil.copyfileobj(src, dst)
                dst.flush()
                os.fsync(dst.fileno())
            target.chmod(FILE_MODE)
        except OSError as e:
            raise WriteFailed(f"Failed to back up {name}: {e}") from e

        logger.info("Backed up %s to %s", name, target)
        return target

    def list_backups(self, name: str | None = None) -> list[Path]:
        """List backup files, oldest first, optionally for one credential."""
        if not self.backup_dir.is_dir():
            return []
        found = []
        for path in self.backup_dir.glob("*.txt.bak"):
            m = _BACKUP_NAME.match(path.name)
            if m is None:
                continue
            if name is None or m["name"] == name:
                found.append((m["name"], m["stamp"], int(m["n"] or 0), path))
        return [entry[-1] for entry in sorted(found)]

    # ─── Initialization state ───────────────────────────────────────────

    def is_initialized(self) -> bool:
        return (self.secrets_dir / INITIALIZED_MARKER).exists()

    def mark_initialized(self) -> None:
        marker = self.secrets_dir / INITIALIZED_MARKER
        marker.touch()
        marker.chmod(FILE_MODE)

    def write_gitignore(self) -> Path:
        path = self.secrets_dir / ".gitignore"
        path.write_text(GITIGNORE)
        return path
