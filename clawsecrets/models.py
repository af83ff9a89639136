"""Ledger data models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _check_timestamp(value: str) -> str:
    """Accept only ``YYYY-MM-DDTHH:MM:SSZ``; anything else makes the ledger unreadable."""
    datetime.strptime(value, TIMESTAMP_FORMAT)
    return value


class SecretEntry(BaseModel):
    """Per-credential timestamps (never the value)."""

    model_config = ConfigDict(extra="allow")

    created: str
    expires: str
    format: str = ""
    service: str = ""

    @field_validator("created", "expires")
    @classmethod
    def _utc_timestamp(cls, v: str) -> str:
        return _check_timestamp(v)


class LedgerDocument(BaseModel):
    """The whole .metadata.json document."""

    model_config = ConfigDict(extra="allow")

    created_at: str
    rotate_by: str
    rotation_days: int = 90
    secrets: dict[str, SecretEntry] = Field(default_factory=dict)

    @field_validator("created_at", "rotate_by")
    @classmethod
    def _utc_timestamp(cls, v: str) -> str:
        return _check_timestamp(v)
