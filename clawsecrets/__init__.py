"""
clawsecrets — lifecycle manager for the credentials consumed by an OpenClaw deployment.

Public API:
    SecretStore          → on-disk credential files, atomic replace, backups
    MetadataLedger       → creation/expiry record (.metadata.json)
    RotationOrchestrator → backup → prompt → validate → ledger → swap → reload
    evaluate_expiry      → days remaining and status for check-expiry
"""

from __future__ import annotations

__version__ = "0.1.0"

from clawsecrets.expiry import ExpiryStatus, evaluate_expiry
from clawsecrets.ledger import MetadataLedger
from clawsecrets.rotation import RotationOrchestrator
from clawsecrets.store import SecretStore

__all__ = [
    "ExpiryStatus",
    "MetadataLedger",
    "RotationOrchestrator",
    "SecretStore",
    "__version__",
    "evaluate_expiry",
]
