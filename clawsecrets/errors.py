"""Error kinds raised by the secret lifecycle components.

Library code raises these; only the CLI turns them into messages and exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clawsecrets.rotation import RotationSummary


class SecretsError(Exception):
    """Base class for all clawsecrets errors."""


class Uninitialized(SecretsError):
    """The metadata ledger does not exist — run 'clawsecrets init' first."""

    def __init__(self, path: object = None):
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(
            f"Secrets not initialized: metadata ledger missing{where}. "
            "Run 'clawsecrets init' first."
        )


NotInitialized = Uninitialized


class LedgerCorrupt(SecretsError):
    """The ledger file exists but cannot be parsed."""


class NotFound(SecretsError):
    """A secret file is missing."""

    def __init__(self, name: str, path: object = None, message: str | None = None):
        self.name = name
        self.path = path
        if message is None:
            message = f"Secret not found: {name}" + (f" ({path})" if path else "")
        super().__init__(message)


class NoExistingSecret(NotFound):
    """Rotation needs a prior value; first-time creation belongs to init."""

    def __init__(self, name: str, path: object = None):
        super().__init__(
            name,
            path,
            f"No existing secret to rotate: {name}. Use 'clawsecrets init' to create it.",
        )


class ValidationFailed(SecretsError):
    """Candidate value does not match the credential's format."""


class EmptyInput(SecretsError):
    """Candidate value was empty."""


class WriteFailed(SecretsError):
    """Filesystem error while writing a secret; the previous value is still live."""


class MetadataWriteFailed(SecretsError):
    """Filesystem error while rewriting the ledger."""


class ReloadTimeout(SecretsError):
    """The service did not report healthy in time. Logged, never fatal."""


class UnknownCredential(SecretsError):
    """Name is not part of the credential catalogue."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown secret: {name}")


class LockHeld(SecretsError):
    """Another rotation or init run holds the lock."""


class RotationAborted(SecretsError):
    """Operator interrupted a rotation; live secrets keep their last-consistent state."""

    def __init__(self, name: str | None = None, summary: RotationSummary | None = None):
        self.name = name
        self.summary = summary
        super().__init__(f"Rotation aborted by operator{f' during {name}' if name else ''}")


class RotationFailed(SecretsError):
    """A credential's rotation failed at a specific step.

    ``summary`` holds the credentials rotated earlier in the same run, which stay rotated.
    """

    def __init__(
        self,
        name: str,
        step: str,
        cause: BaseException,
        summary: RotationSummary | None = None,
    ):
        self.name = name
        self.step = step
        self.cause = cause
        self.summary = summary
        super().__init__(f"Rotation of {name} failed at step '{step}': {cause}")
