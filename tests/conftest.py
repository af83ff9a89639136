"""Shared fixtures for clawsecrets tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from clawsecrets.credentials import CREDENTIALS
from clawsecrets.ledger import MetadataLedger
from clawsecrets.store import SecretStore

from tests.helpers import VALID, FakeClock


@pytest.fixture
def secrets_dir(tmp_path: Path) -> Path:
    return tmp_path / "secrets"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(secrets_dir: Path, clock: FakeClock) -> SecretStore:
    return SecretStore(secrets_dir, clock=clock)


@pytest.fixture
def ledger(secrets_dir: Path) -> MetadataLedger:
    return MetadataLedger(secrets_dir / ".metadata.json")


@pytest.fixture
def initialized(store: SecretStore, ledger: MetadataLedger, clock: FakeClock):
    """A secrets directory populated with every credential and a fresh ledger."""
    for c in CREDENTIALS:
        store.write(c.name, VALID[c.name])
    ledger.create(CREDENTIALS, clock())
    store.mark_initialized()
    return store, ledger
