"""
Expiry evaluator — read-only days-remaining check against the metadata ledger.

    days_remaining = floor((rotate_by - now) / 86400s)

    < 0   EXPIRED   urgent rotation
    < 7   CRITICAL  rotation due imminently
    < 30  NOTICE    informational
    else  CURRENT
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from clawsecrets.ledger import MetadataLedger, parse_timestamp

SECONDS_PER_DAY = 86400
CRITICAL_DAYS = 7
NOTICE_DAYS = 30


class ExpiryStatus(str, Enum):
    EXPIRED = "expired"
    CRITICAL = "critical"
    NOTICE = "notice"
    CURRENT = "current"


def days_remaining(rotate_by: datetime, now: datetime) -> int:
    return math.floor((rotate_by - now).total_seconds() / SECONDS_PER_DAY)


def classify(days: int) -> ExpiryStatus:
    if days < 0:
        return ExpiryStatus.EXPIRED
    if days < CRITICAL_DAYS:
        return ExpiryStatus.CRITICAL
    if days < NOTICE_DAYS:
        return ExpiryStatus.NOTICE
    return ExpiryStatus.CURRENT


@dataclass
class SecretExpiry:
    name: str
    expires: str
    days_remaining: int
    status: ExpiryStatus


@dataclass
class ExpiryReport:
    created_at: str
    rotate_by: str
    days_remaining: int
    status: ExpiryStatus
    secrets: list[SecretExpiry] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """1 when expired, 0 for every other state."""
        return 1 if self.status is ExpiryStatus.EXPIRED else 0

    @property
    def message(self) -> str:
        d = self.days_remaining
        if self.status is ExpiryStatus.EXPIRED:
            return "EXPIRED! Secrets are overdue for rotation. Run: clawsecrets rotate --all"
        if self.status is ExpiryStatus.CRITICAL:
            return f"WARNING: Secrets expire in {d} days! Schedule rotation soon: clawsecrets rotate"
        if self.status is ExpiryStatus.NOTICE:
            return f"Notice: Secrets expire in {d} days"
        return f"Secrets are current ({d} days remaining)"

    def to_dict(self) -> dict:
        return {
            "created_at": self.created_at,
            "rotate_by": self.rotate_by,
            "days_remaining": self.days_remaining,
            "status": self.status.value,
            "secrets": {
                s.name: {
                    "expires": s.expires,
                    "days_remaining": s.days_remaining,
                    "status": s.status.value,
                }
                for s in self.secrets
            },
        }


def evaluate_expiry(ledger: MetadataLedger, now: datetime | None = None) -> ExpiryReport:
    """Classify the global rotation deadline and each credential's own expiry.

    Raises Uninitialized if the ledger does not exist.
    """
    now = now or datetime.now(UTC)
    doc = ledger.load()

    overall = days_remaining(parse_timestamp(doc.rotate_by), now)
    per_secret = []
    for name, entry in doc.secrets.items():
        d = days_remaining(parse_timestamp(entry.expires), now)
        per_secret.append(SecretExpiry(name, entry.expires, d, classify(d)))

    return ExpiryReport(
        created_at=doc.created_at,
        rotate_by=doc.rotate_by,
        days_remaining=overall,
        status=classify(overall),
        secrets=per_secret,
    )
